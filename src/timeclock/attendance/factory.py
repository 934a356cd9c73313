from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_EARLY_EXIT_GRACE_MINUTES, DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import ClockEventKind
from .strategies.arrival_strategy import ArrivalStrategy
from .strategies.base import ComparisonStrategy
from .strategies.departure_strategy import DepartureStrategy


@dataclass
class ComparisonStrategyFactory:
    """Factory Pattern: choose the comparison strategy for a clock event kind.

    The grace periods differ on purpose: arrivals tolerate a short delay while
    any early departure must be justified.
    """

    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    early_exit_grace_minutes: int = DEFAULT_EARLY_EXIT_GRACE_MINUTES

    def for_kind(self, kind: ClockEventKind) -> ComparisonStrategy:
        kind = ClockEventKind(kind)
        if kind == ClockEventKind.ARRIVAL:
            return ArrivalStrategy(self.late_grace_minutes)
        return DepartureStrategy(self.early_exit_grace_minutes)
