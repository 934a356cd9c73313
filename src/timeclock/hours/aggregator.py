from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import month_bounds, week_bounds
from ..common.logger import get_logger
from ..core.constants import DEFAULT_HOURS_TARGETS, DISPLAY_PRECISION, HOURS_PRECISION
from ..core.enums import EmploymentType

logger = get_logger(__name__)


@dataclass(frozen=True)
class HoursTargets:
    """Weekly/monthly hour targets per employment type."""

    by_type: Mapping[str, Tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_HOURS_TARGETS))

    def for_type(self, employment_type: EmploymentType) -> Tuple[float, float]:
        key = EmploymentType(employment_type).value
        week, month = self.by_type[key]
        return float(week), float(month)


def _progress(hours: float, target: float) -> float:
    if target <= 0:
        return 100.0
    return round(min(hours / target * 100, 100.0), DISPLAY_PRECISION)


@dataclass(frozen=True)
class Summary:
    employee_id: int
    employment_type: EmploymentType
    week_hours: float
    month_hours: float
    week_target: float
    month_target: float
    rank: int

    @property
    def week_progress(self) -> float:
        return _progress(self.week_hours, self.week_target)

    @property
    def month_progress(self) -> float:
        return _progress(self.month_hours, self.month_target)

    @property
    def week_complete(self) -> bool:
        return self.week_hours >= self.week_target

    @property
    def month_complete(self) -> bool:
        return self.month_hours >= self.month_target

    def display(self) -> dict:
        """Dashboard view: hours rounded to one decimal."""
        return {
            "employee_id": self.employee_id,
            "employment_type": self.employment_type.value,
            "week_hours": round(self.week_hours, DISPLAY_PRECISION),
            "month_hours": round(self.month_hours, DISPLAY_PRECISION),
            "week_target": self.week_target,
            "month_target": self.month_target,
            "week_progress": self.week_progress,
            "month_progress": self.month_progress,
            "week_complete": self.week_complete,
            "month_complete": self.month_complete,
            "rank": self.rank,
        }


@dataclass(frozen=True)
class TeamOverview:
    employee_count: int
    total_week_hours: float
    total_month_hours: float
    average_week_hours: float
    average_month_hours: float

    def display(self) -> dict:
        return {
            "employee_count": self.employee_count,
            "total_week_hours": round(self.total_week_hours, DISPLAY_PRECISION),
            "total_month_hours": round(self.total_month_hours, DISPLAY_PRECISION),
            "average_week_hours": round(self.average_week_hours, DISPLAY_PRECISION),
            "average_month_hours": round(self.average_month_hours, DISPLAY_PRECISION),
        }


class HoursAggregator:
    """Roll active attendance records up into weekly/monthly totals per employee.

    Read-only: records are never modified. Deleted records are ignored even if
    the caller passes them in.
    """

    def __init__(self, targets: Optional[HoursTargets] = None):
        self._targets = targets or HoursTargets()

    def summarize(
        self,
        records: Iterable[AttendanceRecord],
        reference_date: date,
        employment_types: Optional[Mapping[int, EmploymentType]] = None,
    ) -> Dict[int, Summary]:
        """Return summaries keyed by employee id, in rank order.

        Employees appear in order of first record, then any remaining ids from
        ``employment_types``; that order breaks ranking ties. Employees missing
        from ``employment_types`` are treated as full time.
        """
        employment_types = employment_types or {}
        week_start, week_end = week_bounds(reference_date)
        month_start, month_end = month_bounds(reference_date)

        totals: Dict[int, list] = {}
        for r in records:
            if r.deleted:
                continue
            bucket = totals.setdefault(r.employee_id, [0.0, 0.0])
            if week_start <= r.work_date <= week_end:
                bucket[0] += r.total_hours
            if month_start <= r.work_date <= month_end:
                bucket[1] += r.total_hours

        for employee_id in employment_types:
            totals.setdefault(int(employee_id), [0.0, 0.0])

        ordered = sorted(totals.items(), key=lambda item: -round(item[1][1], HOURS_PRECISION))

        result: Dict[int, Summary] = {}
        for position, (employee_id, (week, month)) in enumerate(ordered, start=1):
            employment_type = EmploymentType(employment_types.get(employee_id, EmploymentType.FULL_TIME))
            week_target, month_target = self._targets.for_type(employment_type)
            result[employee_id] = Summary(
                employee_id=employee_id,
                employment_type=employment_type,
                week_hours=round(week, HOURS_PRECISION),
                month_hours=round(month, HOURS_PRECISION),
                week_target=week_target,
                month_target=month_target,
                rank=position,
            )

        logger.debug("Summarized %d employees for %s", len(result), reference_date)
        return result

    @staticmethod
    def team_overview(summaries: Mapping[int, Summary]) -> TeamOverview:
        count = len(summaries)
        week = round(sum(s.week_hours for s in summaries.values()), HOURS_PRECISION)
        month = round(sum(s.month_hours for s in summaries.values()), HOURS_PRECISION)
        divisor = count or 1
        return TeamOverview(
            employee_count=count,
            total_week_hours=week,
            total_month_hours=month,
            average_week_hours=round(week / divisor, HOURS_PRECISION),
            average_month_hours=round(month / divisor, HOURS_PRECISION),
        )
