from __future__ import annotations

from datetime import date, time

from ..common.validators import require_non_empty
from ..schedules.model import Employee
from .model import AttendanceRecord


class IncidentRecorder:
    """Handle a clock-out that finds no clock-in for the day ("forgot to clock in").

    The produced record is zero-length: both endpoints are the clock-out time.
    """

    def record_incident(self, employee: Employee, work_date: date, at: time, reason: str) -> AttendanceRecord:
        reason = require_non_empty(reason, "Incident reason")
        return AttendanceRecord(
            record_id=None,
            employee_id=employee.employee_id,
            work_date=work_date,
        ).with_times(
            clock_in=at,
            clock_out=at,
            has_incident=True,
            incident_reason=reason,
        )
