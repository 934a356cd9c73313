from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..audit.model import AuditEntry
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Persistence port for attendance records.

    Implementations must enforce "at most one non-deleted record per
    (employee_id, work_date)" and raise ``ConflictError`` from ``create`` /
    ``update`` when a write would break it. Every write takes the audit entry
    describing it; the record change and the entry commit together or not at
    all.
    """

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        """Any record, deleted or not."""

        raise NotImplementedError

    def get_active_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord, *, audit: AuditEntry) -> AttendanceRecord:
        """Insert and return the stored record (with ``record_id`` set).

        ``audit.record_id`` is replaced with the new id.
        """

        raise NotImplementedError

    def update(self, record: AttendanceRecord, *, audit: AuditEntry) -> AttendanceRecord:
        raise NotImplementedError

    def purge(self, record_id: int, *, audit: AuditEntry) -> bool:
        """Physically remove a record. The audit entry outlives it."""

        raise NotImplementedError

    def list_active_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        """Non-deleted records with ``start_date <= work_date <= end_date``, oldest first."""

        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Non-deleted records, newest first."""

        raise NotImplementedError

    def list_deleted(self, *, limit: int = 200) -> Sequence[AttendanceRecord]:
        """Deleted records, most recently deleted first."""

        raise NotImplementedError
