from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, week_bounds
from ..core.exceptions import AuthorizationError
from ..core.session import SessionContext
from ..schedules.repository import ScheduleDirectory
from .aggregator import HoursAggregator, Summary, TeamOverview


@dataclass(frozen=True)
class HoursReport:
    reference_date: date
    summaries: Dict[int, Summary]
    overview: TeamOverview

    def to_dict(self, names: Optional[Dict[int, str]] = None) -> dict:
        names = names or {}
        rows = []
        for s in self.summaries.values():
            row = s.display()
            row["display_name"] = names.get(s.employee_id)
            rows.append(row)
        return {
            "reference_date": self.reference_date.isoformat(),
            "employees": rows,
            "overview": self.overview.display(),
        }


class HoursSummaryService:
    """Load the active records around a reference date and aggregate them."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: ScheduleDirectory,
        *,
        aggregator: Optional[HoursAggregator] = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._aggregator = aggregator or HoursAggregator()

    @staticmethod
    def scope(session: SessionContext, employee_ids: Optional[Iterable[int]] = None) -> Optional[List[int]]:
        """Employee ids the caller may see; employees only ever see themselves."""
        ids = [int(i) for i in employee_ids] if employee_ids is not None else None
        if session.is_supervisor:
            return ids
        if ids is not None and ids != [int(session.actor_id)]:
            raise AuthorizationError("Employees can only view their own hours")
        return [int(session.actor_id)]

    def build_report(
        self,
        session: SessionContext,
        *,
        reference_date: date,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> HoursReport:
        ids = self.scope(session, employee_ids)

        # The ISO week can straddle a month boundary, so load the union of both windows.
        week_start, week_end = week_bounds(reference_date)
        month_start, month_end = month_bounds(reference_date)
        records = self._attendance.list_active_between(
            start_date=min(week_start, month_start),
            end_date=max(week_end, month_end),
            employee_ids=ids,
        )

        employees = self._directory.list_employees(ids)
        employment_types = {e.employee_id: e.employment_type for e in employees}

        summaries = self._aggregator.summarize(records, reference_date, employment_types)
        return HoursReport(
            reference_date=reference_date,
            summaries=summaries,
            overview=self._aggregator.team_overview(summaries),
        )

    def display_names(self, employee_ids: Optional[Iterable[int]] = None) -> Dict[int, str]:
        return {e.employee_id: e.display_name for e in self._directory.list_employees(employee_ids)}
