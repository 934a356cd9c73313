from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """Who did what to which attendance record, and when.

    ``record_id`` is ``None`` while the record it describes is still being
    inserted; the repository fills it in inside the same transaction.
    """

    record_id: Optional[int]
    actor_id: int
    action: AuditAction
    occurred_at: datetime
    detail: Optional[str] = None
    audit_id: Optional[int] = None

    def for_record(self, record_id: int) -> "AuditEntry":
        return replace(self, record_id=int(record_id))

    def to_dict(self) -> dict:
        return {
            "audit_id": self.audit_id,
            "record_id": self.record_id,
            "actor_id": self.actor_id,
            "action": self.action.value,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
            "detail": self.detail,
        }
