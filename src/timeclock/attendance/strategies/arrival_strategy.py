from __future__ import annotations

from .base import ComparisonStrategy


class ArrivalStrategy(ComparisonStrategy):
    """Late arrival: minutes after the scheduled start."""

    def delay(self, *, scheduled_minutes: int, actual_minutes: int) -> int:
        return actual_minutes - scheduled_minutes
