from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

from ..common.validators import clean_optional, require_non_empty
from ..core.enums import AttendanceState, ClockEventKind
from ..core.exceptions import ConflictError, InvalidStateError, ValidationError
from ..schedules.model import Employee
from .comparator import ScheduleComparator
from .incident import IncidentRecorder
from .model import AttendanceRecord


def state_of(active: Optional[AttendanceRecord]) -> AttendanceState:
    """Lifecycle state of an employee-day given its active record (if any)."""
    if active is None:
        return AttendanceState.ABSENT
    return active.state


class AttendanceStateMachine:
    """Legal transitions of an employee-day.

    ABSENT -> CLOCKED_IN -> COMPLETED, with ``deleted`` as an orthogonal tag.
    Methods are pure: they receive the current active record for the day and
    return the record to persist. A returned record with ``record_id=None`` is
    new and must be inserted; otherwise it replaces the stored row.
    """

    def __init__(
        self,
        comparator: Optional[ScheduleComparator] = None,
        incidents: Optional[IncidentRecorder] = None,
    ):
        self._comparator = comparator or ScheduleComparator()
        self._incidents = incidents or IncidentRecorder()

    def clock_in(
        self,
        *,
        employee: Employee,
        work_date: date,
        at: time,
        active: Optional[AttendanceRecord],
        justification: Optional[str] = None,
    ) -> AttendanceRecord:
        current = state_of(active)
        if current == AttendanceState.CLOCKED_IN:
            raise ConflictError("Already clocked in today")
        if current == AttendanceState.COMPLETED:
            raise ConflictError("Already clocked in today; the working day is complete")

        result = self._comparator.classify(employee.scheduled_start, at, ClockEventKind.ARRIVAL)
        reason = None
        if result.flagged:
            reason = self._require_justification(
                justification,
                f"Justification required: arrival is {result.delay_minutes} minutes late",
            )

        return AttendanceRecord(record_id=None, employee_id=employee.employee_id, work_date=work_date).with_times(
            clock_in=at,
            clock_out=None,
            is_late=result.flagged,
            late_reason=reason,
        )

    def clock_out(
        self,
        *,
        employee: Employee,
        work_date: date,
        at: time,
        active: Optional[AttendanceRecord],
        justification: Optional[str] = None,
        incident_reason: Optional[str] = None,
    ) -> AttendanceRecord:
        current = state_of(active)
        if current == AttendanceState.ABSENT:
            return self._incidents.record_incident(employee, work_date, at, incident_reason)
        if current == AttendanceState.COMPLETED:
            raise InvalidStateError("Already clocked out today")

        if at < active.clock_in:
            raise ValidationError("Clock-out time cannot be earlier than clock-in time")

        result = self._comparator.classify(employee.scheduled_end, at, ClockEventKind.DEPARTURE)
        reason = None
        if result.flagged:
            reason = self._require_justification(
                justification,
                f"Justification required: departure is {result.delay_minutes} minutes early",
            )

        return active.with_times(
            clock_in=active.clock_in,
            clock_out=at,
            is_early_exit=result.flagged,
            early_exit_reason=reason,
        )

    def correct(
        self,
        record: AttendanceRecord,
        *,
        employee: Employee,
        clock_in: Optional[time] = None,
        clock_out: Optional[time] = None,
        reason: str,
    ) -> AttendanceRecord:
        """Supervisor fix of one or both endpoints of a live record.

        Late and early-exit flags are re-evaluated against the schedule; a
        newly raised flag takes the correction reason as its justification.
        """
        if record.deleted:
            raise InvalidStateError("Deleted records cannot be corrected; restore it first")
        if clock_in is None and clock_out is None:
            raise ValidationError("Provide a new clock-in or clock-out time")
        reason = require_non_empty(reason, "Correction reason")

        new_in = clock_in if clock_in is not None else record.clock_in
        new_out = clock_out if clock_out is not None else record.clock_out
        if new_out is not None and new_in is not None and new_out < new_in:
            raise ValidationError("Clock-out time cannot be earlier than clock-in time")

        # Incident endpoints are placeholders until a supervisor supplies the real time.
        late = None
        if not (record.has_incident and clock_in is None):
            late = self._comparator.classify(employee.scheduled_start, new_in, ClockEventKind.ARRIVAL)
        early = None
        if new_out is not None and not (record.has_incident and clock_out is None):
            early = self._comparator.classify(employee.scheduled_end, new_out, ClockEventKind.DEPARTURE)
        is_late = bool(late and late.flagged)
        is_early_exit = bool(early and early.flagged)

        return record.with_times(
            clock_in=new_in,
            clock_out=new_out,
            is_late=is_late,
            late_reason=(record.late_reason or reason) if is_late else None,
            is_early_exit=is_early_exit,
            early_exit_reason=(record.early_exit_reason or reason) if is_early_exit else None,
        )

    def delete(self, record: AttendanceRecord, *, reason: str, actor_id: int, at: datetime) -> AttendanceRecord:
        if record.deleted:
            raise InvalidStateError("Record is already deleted")
        reason = require_non_empty(reason, "Deletion reason")
        return replace(
            record,
            deleted=True,
            deleted_reason=reason,
            deleted_by=int(actor_id),
            deleted_at=at,
        )

    def restore(self, record: AttendanceRecord, *, active: Optional[AttendanceRecord]) -> AttendanceRecord:
        """``active`` is the current live record for the same employee-day, if any."""
        if not record.deleted:
            raise InvalidStateError("Record is not deleted")
        if active is not None and active.record_id != record.record_id:
            raise ConflictError(
                "Another active record exists for this employee and day; delete it before restoring"
            )
        return replace(
            record,
            deleted=False,
            deleted_reason=None,
            deleted_by=None,
            deleted_at=None,
        )

    @staticmethod
    def _require_justification(value: Optional[str], message: str) -> str:
        cleaned = clean_optional(value)
        if cleaned is None:
            raise ValidationError(message)
        return cleaned
