from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Classification:
    """Outcome of comparing an actual clock time with the schedule.

    ``delay_minutes`` is signed: positive means "worse than scheduled" (late
    arrival, early departure).
    """

    delay_minutes: int
    flagged: bool


class ComparisonStrategy(ABC):
    """Strategy Pattern: how one kind of clock event is measured against the schedule."""

    def __init__(self, grace_minutes: int):
        self.grace_minutes = int(grace_minutes)

    @abstractmethod
    def delay(self, *, scheduled_minutes: int, actual_minutes: int) -> int:
        raise NotImplementedError

    def classify(self, *, scheduled_minutes: int, actual_minutes: int) -> Classification:
        delay = self.delay(scheduled_minutes=scheduled_minutes, actual_minutes=actual_minutes)
        return Classification(delay_minutes=delay, flagged=delay > self.grace_minutes)
