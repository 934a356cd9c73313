from __future__ import annotations

import os
import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Iterable, Optional

import pytest

from timeclock.attendance.model import AttendanceRecord
from timeclock.container import build_services
from timeclock.core.enums import EmploymentType, Role
from timeclock.core.exceptions import ConflictError
from timeclock.core.session import SessionContext
from timeclock.schedules.model import Employee

os.environ.setdefault("APP_ENV", "testing")


class InMemoryAttendance:
    """Fake store with the same partial-uniqueness guarantee as the MySQL schema.

    Audit entries go to ``audit`` before the row change is kept, so a failing
    audit write leaves the rows untouched, like the MySQL transaction.
    """

    def __init__(self, audit: "InMemoryAudit"):
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._lock = threading.Lock()
        self._audit = audit

    def _log(self, audit, record_id: int) -> None:
        if audit is not None:
            self._audit.append(audit.for_record(record_id))

    def _check_unique(self, record: AttendanceRecord) -> None:
        if record.deleted:
            return
        for other in self._rows.values():
            if (
                not other.deleted
                and other.record_id != record.record_id
                and other.employee_id == record.employee_id
                and other.work_date == record.work_date
            ):
                raise ConflictError("duplicate active record")

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(int(record_id))

    def get_active_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._rows.values():
            if r.employee_id == employee_id and r.work_date == work_date and not r.deleted:
                return r
        return None

    def create(self, record: AttendanceRecord, *, audit=None) -> AttendanceRecord:
        with self._lock:
            self._check_unique(record)
            stored = replace(record, record_id=self._id + 1)
            self._log(audit, stored.record_id)
            self._id += 1
            self._rows[self._id] = stored
            return stored

    def update(self, record: AttendanceRecord, *, audit=None) -> AttendanceRecord:
        with self._lock:
            self._check_unique(record)
            self._log(audit, record.record_id)
            self._rows[int(record.record_id)] = record
            return record

    def purge(self, record_id: int, *, audit=None) -> bool:
        with self._lock:
            if int(record_id) not in self._rows:
                return False
            self._log(audit, record_id)
            del self._rows[int(record_id)]
            return True

    def list_active_between(self, *, start_date: date, end_date: date, employee_ids: Optional[Iterable[int]] = None):
        ids = set(employee_ids) if employee_ids is not None else None
        items = [
            r
            for r in self._rows.values()
            if not r.deleted and start_date <= r.work_date <= end_date and (ids is None or r.employee_id in ids)
        ]
        items.sort(key=lambda r: (r.work_date, r.record_id))
        return items

    def get_recent_for_employee(self, employee_id: int, limit: int):
        items = [r for r in self._rows.values() if r.employee_id == employee_id and not r.deleted]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def list_deleted(self, *, limit: int = 200):
        items = [r for r in self._rows.values() if r.deleted]
        items.sort(key=lambda r: r.deleted_at, reverse=True)
        return items[:limit]

    # test helper
    def active_count(self, employee_id: int, work_date: date) -> int:
        return sum(
            1
            for r in self._rows.values()
            if r.employee_id == employee_id and r.work_date == work_date and not r.deleted
        )


class InMemoryDirectory:
    def __init__(self, employees: Iterable[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def list_employees(self, employee_ids=None):
        if employee_ids is None:
            return list(self._by_id.values())
        return [self._by_id[i] for i in employee_ids if i in self._by_id]


class InMemoryAudit:
    def __init__(self):
        self.entries = []
        self.fail_with: Optional[Exception] = None

    def append(self, entry) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        self.entries.append(entry)
        return len(self.entries)

    def list_for_record(self, record_id: int):
        return [e for e in self.entries if e.record_id == record_id]


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def full_timer() -> Employee:
    return Employee(
        employee_id=1,
        display_name="Ana Full",
        employment_type=EmploymentType.FULL_TIME,
        scheduled_start=time(9, 0),
        scheduled_end=time(17, 0),
        department="Ops",
    )


@pytest.fixture
def part_timer() -> Employee:
    return Employee(
        employee_id=2,
        display_name="Bo Part",
        employment_type=EmploymentType.PART_TIME,
        scheduled_start=time(14, 0),
        scheduled_end=time(18, 0),
    )


@pytest.fixture
def attendance_repo(audit_repo) -> InMemoryAttendance:
    return InMemoryAttendance(audit_repo)


@pytest.fixture
def audit_repo() -> InMemoryAudit:
    return InMemoryAudit()


@pytest.fixture
def directory(full_timer, part_timer) -> InMemoryDirectory:
    return InMemoryDirectory([full_timer, part_timer])


@pytest.fixture
def container(attendance_repo, directory, audit_repo):
    return build_services(attendance_repo=attendance_repo, directory=directory, audit_repo=audit_repo)


@pytest.fixture
def service(container):
    return container.attendance_service


@pytest.fixture
def employee_session() -> SessionContext:
    return SessionContext(actor_id=1, role=Role.EMPLOYEE)


@pytest.fixture
def supervisor_session() -> SessionContext:
    return SessionContext(actor_id=99, role=Role.SUPERVISOR)
