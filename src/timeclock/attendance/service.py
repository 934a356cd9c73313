from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterator, Optional, Sequence, Union

from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..common.datetime_utils import now_local, parse_hhmm, parse_timestamp
from ..common.logger import get_logger
from ..common.validators import clean_optional
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceState, AuditAction, TodayStatus
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..core.session import SessionContext
from ..schedules.model import Employee
from ..schedules.repository import ScheduleDirectory
from .ledger import SoftDeleteLedger
from .locks import DayLocks
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine, state_of

logger = get_logger(__name__)

Timestamp = Union[datetime, str, None]
TimeOfDay = Union[time, str, None]


@dataclass(frozen=True)
class DayStatus:
    status: TodayStatus
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        return {"status": self.status.value, "record": self.record.to_dict() if self.record else None}


_STATUS_BY_STATE = {
    AttendanceState.ABSENT: TodayStatus.OUT,
    AttendanceState.CLOCKED_IN: TodayStatus.IN,
    AttendanceState.COMPLETED: TodayStatus.COMPLETE,
}


class AttendanceService:
    """Entry point for clock events and supervisor corrections.

    Every mutating call takes the caller's ``SessionContext`` and is serialized
    per employee-day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: ScheduleDirectory,
        audit: AuditRepository,
        *,
        state_machine: Optional[AttendanceStateMachine] = None,
        locks: Optional[DayLocks] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._directory = directory
        self._audit = audit
        self._machine = state_machine or AttendanceStateMachine()
        self._locks = locks or DayLocks()
        self._clock = clock
        self._ledger = SoftDeleteLedger(
            attendance,
            state_machine=self._machine,
            locks=self._locks,
            clock=clock,
        )

    @contextmanager
    def _rejections_logged(self, operation: str, **context) -> Iterator[None]:
        try:
            yield
        except DomainError as e:
            logger.warning("%s rejected (%s) %s: %s", operation, e.kind, context, e.detail)
            raise

    def _employee(self, employee_id: int) -> Employee:
        employee = self._directory.get_employee(int(employee_id))
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    @staticmethod
    def _require_self_or_supervisor(session: SessionContext, employee_id: int) -> None:
        if not session.is_supervisor and int(session.actor_id) != int(employee_id):
            raise AuthorizationError("Employees can only access their own attendance")

    @staticmethod
    def _require_supervisor(session: SessionContext) -> None:
        if not session.is_supervisor:
            raise AuthorizationError("Only supervisors can manage attendance records")

    def _resolve(self, timestamp: Timestamp) -> datetime:
        ts = parse_timestamp(timestamp) if timestamp is not None else self._clock()
        return ts.replace(second=0, microsecond=0)

    def _entry(self, action: AuditAction, record: AttendanceRecord, actor_id: int, detail: Optional[str] = None) -> AuditEntry:
        return AuditEntry(
            record_id=record.record_id,
            actor_id=int(actor_id),
            action=action,
            occurred_at=self._clock(),
            detail=detail,
        )

    def _load(self, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(record_id))
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} not found")
        return record

    def clock_in(
        self,
        session: SessionContext,
        employee_id: int,
        *,
        timestamp: Timestamp = None,
        late_justification: Optional[str] = None,
    ) -> AttendanceRecord:
        with self._rejections_logged("clock_in", employee_id=employee_id):
            self._require_self_or_supervisor(session, employee_id)
            employee = self._employee(employee_id)
            ts = self._resolve(timestamp)
            work_date = ts.date()

            with self._locks.hold(employee.employee_id, work_date):
                active = self._attendance.get_active_for_employee_and_date(employee.employee_id, work_date)
                record = self._machine.clock_in(
                    employee=employee,
                    work_date=work_date,
                    at=ts.time(),
                    active=active,
                    justification=late_justification,
                )
                saved = self._attendance.create(
                    record, audit=self._entry(AuditAction.CLOCK_IN, record, session.actor_id, record.late_reason)
                )

        logger.info(
            "Employee %s clocked in at %s on %s (late=%s)",
            saved.employee_id, saved.clock_in, saved.work_date, saved.is_late,
        )
        return saved

    def clock_out(
        self,
        session: SessionContext,
        employee_id: int,
        *,
        timestamp: Timestamp = None,
        incident_reason: Optional[str] = None,
        early_exit_justification: Optional[str] = None,
    ) -> AttendanceRecord:
        with self._rejections_logged("clock_out", employee_id=employee_id):
            self._require_self_or_supervisor(session, employee_id)
            employee = self._employee(employee_id)
            ts = self._resolve(timestamp)
            work_date = ts.date()

            with self._locks.hold(employee.employee_id, work_date):
                active = self._attendance.get_active_for_employee_and_date(employee.employee_id, work_date)
                record = self._machine.clock_out(
                    employee=employee,
                    work_date=work_date,
                    at=ts.time(),
                    active=active,
                    justification=early_exit_justification,
                    incident_reason=incident_reason,
                )
                if record.record_id is None:
                    saved = self._attendance.create(
                        record, audit=self._entry(AuditAction.INCIDENT, record, session.actor_id, record.incident_reason)
                    )
                else:
                    saved = self._attendance.update(
                        record, audit=self._entry(AuditAction.CLOCK_OUT, record, session.actor_id, record.early_exit_reason)
                    )

        if saved.has_incident:
            logger.info("Employee %s clocked out without clock-in on %s (incident)", saved.employee_id, saved.work_date)
        else:
            logger.info(
                "Employee %s clocked out at %s on %s (%.2fh, early_exit=%s)",
                saved.employee_id, saved.clock_out, saved.work_date, saved.total_hours, saved.is_early_exit,
            )
        return saved

    def correct_record(
        self,
        session: SessionContext,
        record_id: int,
        *,
        clock_in: TimeOfDay = None,
        clock_out: TimeOfDay = None,
        reason: str,
    ) -> AttendanceRecord:
        with self._rejections_logged("correct", record_id=record_id):
            self._require_supervisor(session)
            new_in = self._time_of_day(clock_in)
            new_out = self._time_of_day(clock_out)
            record = self._load(record_id)

            with self._locks.hold(record.employee_id, record.work_date):
                record = self._load(record_id)
                employee = self._employee(record.employee_id)
                corrected = self._machine.correct(
                    record, employee=employee, clock_in=new_in, clock_out=new_out, reason=reason
                )
                saved = self._attendance.update(
                    corrected,
                    audit=self._entry(
                        AuditAction.CORRECT,
                        corrected,
                        session.actor_id,
                        f"{_fmt(record.clock_in)}-{_fmt(record.clock_out)} -> "
                        f"{_fmt(corrected.clock_in)}-{_fmt(corrected.clock_out)}: {clean_optional(reason)}",
                    ),
                )

        logger.info(
            "Record %s corrected by %s: %s-%s (%.2fh)",
            saved.record_id, session.actor_id, saved.clock_in, saved.clock_out, saved.total_hours,
        )
        return saved

    def delete_record(self, session: SessionContext, record_id: int, *, reason: str) -> AttendanceRecord:
        with self._rejections_logged("delete", record_id=record_id):
            self._require_supervisor(session)
            return self._ledger.delete(record_id, reason=reason, actor_id=session.actor_id)

    def restore_record(self, session: SessionContext, record_id: int) -> AttendanceRecord:
        with self._rejections_logged("restore", record_id=record_id):
            self._require_supervisor(session)
            return self._ledger.restore(record_id, actor_id=session.actor_id)

    def purge_record(self, session: SessionContext, record_id: int) -> None:
        with self._rejections_logged("purge", record_id=record_id):
            self._require_supervisor(session)
            self._ledger.purge(record_id, actor_id=session.actor_id)

    def list_deleted(self, session: SessionContext, *, limit: int = 200) -> Sequence[AttendanceRecord]:
        self._require_supervisor(session)
        return self._ledger.list_deleted(limit=limit)

    def audit_trail(self, session: SessionContext, record_id: int) -> Sequence[AuditEntry]:
        """Every audited change of a record, oldest first. Purged records keep their trail."""
        self._require_supervisor(session)
        return self._audit.list_for_record(int(record_id))

    def list_records(
        self,
        session: SessionContext,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        if employee_id is None or int(employee_id) != int(session.actor_id):
            self._require_supervisor(session)
        if end < start:
            raise ValidationError("End date cannot be before start date")
        ids = [int(employee_id)] if employee_id is not None else None
        return self._attendance.list_active_between(start_date=start, end_date=end, employee_ids=ids)

    def get_record(self, session: SessionContext, record_id: int) -> AttendanceRecord:
        record = self._load(record_id)
        if not session.is_supervisor and record.employee_id != int(session.actor_id):
            raise AuthorizationError("Employees can only view their own records")
        return record

    def today_status(
        self, session: SessionContext, employee_id: Optional[int] = None, *, on: Optional[date] = None
    ) -> DayStatus:
        employee_id = session.actor_id if employee_id is None else int(employee_id)
        self._require_self_or_supervisor(session, employee_id)
        work_date = on or self._clock().date()
        active = self._attendance.get_active_for_employee_and_date(employee_id, work_date)
        return DayStatus(status=_STATUS_BY_STATE[state_of(active)], record=active)

    def history(
        self, session: SessionContext, employee_id: Optional[int] = None, *, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> Sequence[AttendanceRecord]:
        employee_id = session.actor_id if employee_id is None else int(employee_id)
        self._require_self_or_supervisor(session, employee_id)
        return self._attendance.get_recent_for_employee(employee_id, int(limit))

    @staticmethod
    def _time_of_day(value: TimeOfDay) -> Optional[time]:
        if value is None or value == "":
            return None
        parsed = value if isinstance(value, time) else parse_hhmm(value)
        return parsed.replace(second=0, microsecond=0)


def _fmt(value: Optional[time]) -> str:
    return value.strftime("%H:%M") if value else "--:--"
