from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import EmploymentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Employee
from .repository import ScheduleDirectory

_SELECT = """
    SELECT e.employee_id, e.display_name, e.employment_type,
           e.scheduled_start, e.scheduled_end, d.dept_name
    FROM employees e
    LEFT JOIN departments d ON d.dept_id = e.dept_id
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        display_name=r["display_name"],
        employment_type=EmploymentType(r["employment_type"]),
        scheduled_start=normalize_mysql_time(r.get("scheduled_start")),
        scheduled_end=normalize_mysql_time(r.get("scheduled_end")),
        department=r.get("dept_name"),
    )


class MySQLScheduleDirectory(ScheduleDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_employees(self, employee_ids: Optional[Iterable[int]] = None) -> Sequence[Employee]:
        ids = [int(i) for i in employee_ids] if employee_ids is not None else None
        with db_cursor(self._conn_factory) as (_, cur):
            if ids is None:
                cur.execute(_SELECT + " ORDER BY e.employee_id")
            elif not ids:
                return []
            else:
                placeholders = ",".join(["%s"] * len(ids))
                cur.execute(_SELECT + f" WHERE e.employee_id IN ({placeholders}) ORDER BY e.employee_id", tuple(ids))
            return [_to_employee(r) for r in fetchall(cur)]
