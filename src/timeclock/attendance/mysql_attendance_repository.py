from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence

from ..audit.model import AuditEntry
from ..audit.mysql_audit_repository import insert_entry
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, employee_id, work_date, clock_in, clock_out, total_hours,
    is_late, late_reason, is_early_exit, early_exit_reason,
    has_incident, incident_reason,
    deleted, deleted_reason, deleted_by, deleted_at,
    created_at, updated_at
"""

_WRITABLE = (
    "employee_id",
    "work_date",
    "clock_in",
    "clock_out",
    "total_hours",
    "is_late",
    "late_reason",
    "is_early_exit",
    "early_exit_reason",
    "has_incident",
    "incident_reason",
    "deleted",
    "deleted_reason",
    "deleted_by",
    "deleted_at",
)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    total = r.get("total_hours") or 0
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=normalize_mysql_time(r.get("clock_in")),
        clock_out=normalize_mysql_time(r.get("clock_out")),
        total_hours=float(total),
        is_late=bool(r.get("is_late")),
        late_reason=r.get("late_reason"),
        is_early_exit=bool(r.get("is_early_exit")),
        early_exit_reason=r.get("early_exit_reason"),
        has_incident=bool(r.get("has_incident")),
        incident_reason=r.get("incident_reason"),
        deleted=bool(r.get("deleted")),
        deleted_reason=r.get("deleted_reason"),
        deleted_by=int(r["deleted_by"]) if r.get("deleted_by") is not None else None,
        deleted_at=r.get("deleted_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _params(record: AttendanceRecord) -> tuple:
    return tuple(
        int(v) if isinstance(v, bool) else v
        for v in (getattr(record, name) for name in _WRITABLE)
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_active_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s AND deleted=0
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord, *, audit: AuditEntry) -> AttendanceRecord:
        placeholders = ",".join(["%s"] * len(_WRITABLE))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO attendance_records({', '.join(_WRITABLE)}) VALUES({placeholders})",
                    _params(record),
                )
                record_id = int(cur.lastrowid)
                insert_entry(cur, audit.for_record(record_id))
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("An active record already exists for this employee and day") from exc
            raise
        return self._require(record_id)

    def update(self, record: AttendanceRecord, *, audit: AuditEntry) -> AttendanceRecord:
        assignments = ", ".join(f"{name}=%s" for name in _WRITABLE)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE attendance_records SET {assignments} WHERE record_id=%s",
                    _params(record) + (int(record.record_id),),
                )
                insert_entry(cur, audit.for_record(record.record_id))
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("An active record already exists for this employee and day") from exc
            raise
        return self._require(int(record.record_id))

    def purge(self, record_id: int, *, audit: AuditEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            removed = cur.rowcount > 0
            if removed:
                insert_entry(cur, audit.for_record(record_id))
            return removed

    def list_active_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["deleted=0", "work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_ids is not None:
            ids = [int(i) for i in employee_ids]
            if not ids:
                return []
            clauses.append(f"employee_id IN ({','.join(['%s'] * len(ids))})")
            params.extend(ids)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date ASC, record_id ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND deleted=0
                ORDER BY work_date DESC, clock_in DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_deleted(self, *, limit: int = 200) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE deleted=1
                ORDER BY deleted_at DESC, record_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def _require(self, record_id: int) -> AttendanceRecord:
        rec = self.get_by_id(record_id)
        if rec is None:
            raise NotFoundError(f"Attendance record {record_id} not found")
        return rec
