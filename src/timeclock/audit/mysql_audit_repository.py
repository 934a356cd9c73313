from __future__ import annotations

from typing import Sequence

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditEntry
from .repository import AuditRepository


def insert_entry(cur, entry: AuditEntry) -> int:
    """Insert ``entry`` on an open cursor; the caller owns the transaction."""
    cur.execute(
        """
        INSERT INTO audit_log(record_id, actor_id, action, occurred_at, detail)
        VALUES(%s,%s,%s,%s,%s)
        """,
        (int(entry.record_id), int(entry.actor_id), entry.action.value, entry.occurred_at, entry.detail),
    )
    return int(cur.lastrowid)


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_record(self, record_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, record_id, actor_id, action, occurred_at, detail
                FROM audit_log
                WHERE record_id=%s
                ORDER BY occurred_at ASC, audit_id ASC
                """,
                (int(record_id),),
            )
            return [
                AuditEntry(
                    audit_id=int(r["audit_id"]),
                    record_id=int(r["record_id"]),
                    actor_id=int(r["actor_id"]),
                    action=AuditAction(r["action"]),
                    occurred_at=r["occurred_at"],
                    detail=r.get("detail"),
                )
                for r in fetchall(cur)
            ]
