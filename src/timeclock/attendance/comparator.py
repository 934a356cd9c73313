from __future__ import annotations

from datetime import time
from typing import Optional

from ..common.datetime_utils import minutes_of_day
from ..core.enums import ClockEventKind
from .factory import ComparisonStrategyFactory
from .strategies.base import Classification

_NOT_SCHEDULED = Classification(delay_minutes=0, flagged=False)


class ScheduleComparator:
    """Classify an actual clock time against the employee's schedule.

    Both times are taken to be on the same calendar day; overnight shifts are
    not supported. Pure: no I/O, no clock reads.
    """

    def __init__(self, factory: Optional[ComparisonStrategyFactory] = None):
        self._factory = factory or ComparisonStrategyFactory()

    def classify(self, scheduled: Optional[time], actual: time, kind: ClockEventKind) -> Classification:
        if scheduled is None:
            return _NOT_SCHEDULED
        strategy = self._factory.for_kind(kind)
        return strategy.classify(
            scheduled_minutes=minutes_of_day(scheduled),
            actual_minutes=minutes_of_day(actual),
        )


def classify(scheduled: Optional[time], actual: time, kind: ClockEventKind) -> Classification:
    """Module-level shortcut using the default grace periods."""
    return ScheduleComparator().classify(scheduled, actual, kind)
