from __future__ import annotations

from typing import Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    """Read side of the audit log.

    Entries are written by ``AttendanceRepository`` together with the record
    change they describe, never on their own.
    """

    def list_for_record(self, record_id: int) -> Sequence[AuditEntry]:
        """Entries for one record, oldest first."""

        raise NotImplementedError
