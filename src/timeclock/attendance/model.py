from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import minutes_of_day
from ..core.constants import HOURS_PRECISION
from ..core.enums import AttendanceState


def compute_total_hours(clock_in: Optional[time], clock_out: Optional[time]) -> float:
    """(out - in) in wall-clock minutes / 60, floored at 0, 2 decimals; 0 while open."""
    if clock_in is None or clock_out is None:
        return 0.0
    minutes = minutes_of_day(clock_out) - minutes_of_day(clock_in)
    return round(max(minutes, 0) / 60, HOURS_PRECISION)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    record_id: Optional[int]
    employee_id: int
    work_date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    total_hours: float = 0.0
    is_late: bool = False
    late_reason: Optional[str] = None
    is_early_exit: bool = False
    early_exit_reason: Optional[str] = None
    has_incident: bool = False
    incident_reason: Optional[str] = None
    deleted: bool = False
    deleted_reason: Optional[str] = None
    deleted_by: Optional[int] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return not self.deleted

    @property
    def state(self) -> AttendanceState:
        if self.clock_out is not None:
            return AttendanceState.COMPLETED
        if self.clock_in is not None:
            return AttendanceState.CLOCKED_IN
        return AttendanceState.ABSENT

    def with_times(self, *, clock_in: Optional[time], clock_out: Optional[time], **changes) -> "AttendanceRecord":
        """Copy with new endpoints; total_hours is always recomputed from them."""
        return replace(
            self,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=compute_total_hours(clock_in, clock_out),
            **changes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "clock_in": self.clock_in.strftime("%H:%M") if self.clock_in else None,
            "clock_out": self.clock_out.strftime("%H:%M") if self.clock_out else None,
            "total_hours": self.total_hours,
            "state": self.state.value,
            "is_late": self.is_late,
            "late_reason": self.late_reason,
            "is_early_exit": self.is_early_exit,
            "early_exit_reason": self.early_exit_reason,
            "has_incident": self.has_incident,
            "incident_reason": self.incident_reason,
            "deleted": self.deleted,
            "deleted_reason": self.deleted_reason,
            "deleted_by": self.deleted_by,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }
