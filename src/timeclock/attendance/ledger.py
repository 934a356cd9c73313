from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from ..audit.model import AuditEntry
from ..common.datetime_utils import now_local
from ..common.logger import get_logger
from ..core.enums import AuditAction
from ..core.exceptions import InvalidStateError, NotFoundError
from .locks import DayLocks
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine

logger = get_logger(__name__)


class SoftDeleteLedger:
    """Logical deletion and restoration of attendance records.

    Deleted rows are kept with who/why/when and stay queryable for audit, but
    they no longer count as the active record of their employee-day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        state_machine: Optional[AttendanceStateMachine] = None,
        locks: Optional[DayLocks] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._machine = state_machine or AttendanceStateMachine()
        self._locks = locks or DayLocks()
        self._clock = clock

    def _load(self, record_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(record_id))
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} not found")
        return record

    def delete(self, record_id: int, *, reason: str, actor_id: int) -> AttendanceRecord:
        record = self._load(record_id)
        with self._locks.hold(record.employee_id, record.work_date):
            record = self._load(record_id)
            now = self._clock()
            change = self._machine.delete(record, reason=reason, actor_id=actor_id, at=now)
            deleted = self._attendance.update(
                change,
                audit=AuditEntry(
                    record_id=change.record_id,
                    actor_id=int(actor_id),
                    action=AuditAction.DELETE,
                    occurred_at=now,
                    detail=change.deleted_reason,
                ),
            )
        logger.info("Record %s deleted by %s: %s", deleted.record_id, actor_id, deleted.deleted_reason)
        return deleted

    def restore(self, record_id: int, *, actor_id: int) -> AttendanceRecord:
        record = self._load(record_id)
        with self._locks.hold(record.employee_id, record.work_date):
            record = self._load(record_id)
            active = self._attendance.get_active_for_employee_and_date(record.employee_id, record.work_date)
            restored = self._attendance.update(
                self._machine.restore(record, active=active),
                audit=AuditEntry(
                    record_id=record.record_id,
                    actor_id=int(actor_id),
                    action=AuditAction.RESTORE,
                    occurred_at=self._clock(),
                ),
            )
        logger.info("Record %s restored by %s", restored.record_id, actor_id)
        return restored

    def purge(self, record_id: int, *, actor_id: int) -> None:
        """Permanently remove a record that was already soft-deleted."""
        record = self._load(record_id)
        with self._locks.hold(record.employee_id, record.work_date):
            record = self._load(record_id)
            if not record.deleted:
                raise InvalidStateError("Only deleted records can be purged")
            self._attendance.purge(
                record.record_id,
                audit=AuditEntry(
                    record_id=record.record_id,
                    actor_id=int(actor_id),
                    action=AuditAction.PURGE,
                    occurred_at=self._clock(),
                    detail=record.deleted_reason,
                ),
            )
        logger.info("Record %s purged by %s", record.record_id, actor_id)

    def list_deleted(self, *, limit: int = 200) -> Sequence[AttendanceRecord]:
        return self._attendance.list_deleted(limit=limit)
