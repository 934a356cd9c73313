from __future__ import annotations

from .base import ComparisonStrategy


class DepartureStrategy(ComparisonStrategy):
    """Early exit: minutes before the scheduled end."""

    def delay(self, *, scheduled_minutes: int, actual_minutes: int) -> int:
        return scheduled_minutes - actual_minutes
