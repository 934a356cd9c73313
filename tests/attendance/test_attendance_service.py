from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from timeclock.core.enums import AuditAction, Role, TodayStatus
from timeclock.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from timeclock.core.session import SessionContext

DAY = date(2025, 3, 10)


def at(hh: int, mm: int) -> datetime:
    return datetime(2025, 3, 10, hh, mm)


def test_end_to_end_early_exit_day(service, employee_session, audit_repo):
    rec = service.clock_in(employee_session, 1, timestamp=at(9, 10))
    assert rec.is_late is False

    rec = service.clock_out(
        employee_session, 1, timestamp=at(16, 45), early_exit_justification="medical appointment"
    )

    assert rec.total_hours == 7.58
    assert rec.is_early_exit is True
    assert rec.early_exit_reason == "medical appointment"
    assert [e.action for e in audit_repo.list_for_record(rec.record_id)] == [
        AuditAction.CLOCK_IN,
        AuditAction.CLOCK_OUT,
    ]


def test_arrival_threshold_boundary(service, employee_session, supervisor_session):
    rec = service.clock_in(employee_session, 1, timestamp=at(9, 15))
    assert rec.is_late is False

    with pytest.raises(ValidationError):
        service.clock_in(supervisor_session, 2, timestamp=at(14, 16))

    rec = service.clock_in(supervisor_session, 2, timestamp=at(14, 16), late_justification="bus strike")
    assert rec.is_late is True
    assert rec.late_reason == "bus strike"


def test_departure_threshold_boundary(service, employee_session, supervisor_session):
    service.clock_in(employee_session, 1, timestamp=at(9, 0))
    rec = service.clock_out(employee_session, 1, timestamp=at(17, 0))
    assert rec.is_early_exit is False

    service.clock_in(supervisor_session, 2, timestamp=at(14, 0))
    with pytest.raises(ValidationError):
        service.clock_out(supervisor_session, 2, timestamp=at(17, 59))
    rec = service.clock_out(supervisor_session, 2, timestamp=at(17, 59), early_exit_justification="school pickup")
    assert rec.is_early_exit is True


def test_rejected_transition_leaves_no_record(service, employee_session, attendance_repo):
    with pytest.raises(ValidationError):
        service.clock_in(employee_session, 1, timestamp=at(10, 0))

    assert attendance_repo.active_count(1, DAY) == 0


def test_double_clock_in_conflicts(service, employee_session, attendance_repo):
    service.clock_in(employee_session, 1, timestamp=at(9, 0))
    with pytest.raises(ConflictError):
        service.clock_in(employee_session, 1, timestamp=at(9, 5))

    service.clock_out(employee_session, 1, timestamp=at(17, 0))
    with pytest.raises(ConflictError):
        service.clock_in(employee_session, 1, timestamp=at(18, 0))

    assert attendance_repo.active_count(1, DAY) == 1


def test_clock_out_twice_is_invalid_state(service, employee_session):
    service.clock_in(employee_session, 1, timestamp=at(9, 0))
    service.clock_out(employee_session, 1, timestamp=at(17, 0))

    with pytest.raises(InvalidStateError):
        service.clock_out(employee_session, 1, timestamp=at(17, 5))


def test_incident_path(service, employee_session, audit_repo):
    with pytest.raises(ValidationError):
        service.clock_out(employee_session, 1, timestamp=at(17, 0), incident_reason=" ")

    rec = service.clock_out(employee_session, 1, timestamp=at(17, 0), incident_reason="forgot to clock in")

    assert rec.has_incident is True
    assert rec.total_hours == 0
    assert rec.clock_in == rec.clock_out
    assert audit_repo.entries[-1].action == AuditAction.INCIDENT

    # the incident record completes the day
    with pytest.raises(InvalidStateError):
        service.clock_out(employee_session, 1, timestamp=at(17, 30), incident_reason="again")


def test_timestamp_strings_are_parsed(service, employee_session):
    rec = service.clock_in(employee_session, 1, timestamp="2025-03-10T09:05:42")
    assert rec.work_date == DAY
    assert rec.clock_in.second == 0

    with pytest.raises(ValidationError):
        service.clock_in(employee_session, 1, timestamp="yesterday-ish")


def test_employee_cannot_clock_for_someone_else(service, employee_session):
    with pytest.raises(AuthorizationError):
        service.clock_in(employee_session, 2, timestamp=at(14, 0))


def test_unknown_employee(service, supervisor_session):
    with pytest.raises(NotFoundError):
        service.clock_in(supervisor_session, 404, timestamp=at(9, 0))


def test_today_status_transitions(service, employee_session):
    assert service.today_status(employee_session, on=DAY).status == TodayStatus.OUT

    service.clock_in(employee_session, 1, timestamp=at(9, 0))
    assert service.today_status(employee_session, on=DAY).status == TodayStatus.IN

    rec = service.clock_out(employee_session, 1, timestamp=at(17, 0))
    status = service.today_status(employee_session, on=DAY)
    assert status.status == TodayStatus.COMPLETE
    assert status.record == rec


def test_history_excludes_deleted_and_is_newest_first(service, employee_session, supervisor_session):
    first = service.clock_in(employee_session, 1, timestamp=datetime(2025, 3, 10, 9, 0))
    second = service.clock_in(employee_session, 1, timestamp=datetime(2025, 3, 11, 9, 0))
    third = service.clock_in(employee_session, 1, timestamp=datetime(2025, 3, 12, 9, 0))
    service.delete_record(supervisor_session, second.record_id, reason="test entry")

    assert [r.record_id for r in service.history(employee_session)] == [third.record_id, first.record_id]


def test_list_records_requires_supervisor_for_others(service, employee_session, supervisor_session):
    service.clock_in(supervisor_session, 2, timestamp=at(14, 0))

    with pytest.raises(AuthorizationError):
        service.list_records(employee_session, start=DAY, end=DAY)
    with pytest.raises(ValidationError):
        service.list_records(supervisor_session, start=DAY, end=date(2025, 3, 1))

    assert len(service.list_records(supervisor_session, start=DAY, end=DAY)) == 1
    assert service.list_records(employee_session, start=DAY, end=DAY, employee_id=1) == []


def test_concurrent_clock_ins_yield_one_success(service, attendance_repo):
    session = SessionContext(actor_id=1, role=Role.EMPLOYEE)
    barrier = threading.Barrier(8)
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt():
        barrier.wait()
        try:
            service.clock_in(session, 1, timestamp=at(9, 0))
            result = "ok"
        except ConflictError:
            result = "conflict"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7
    assert attendance_repo.active_count(1, DAY) == 1


def test_failed_audit_write_creates_no_record(service, employee_session, attendance_repo, audit_repo):
    audit_repo.fail_with = RuntimeError("audit log unavailable")

    with pytest.raises(RuntimeError):
        service.clock_in(employee_session, 1, timestamp=at(9, 0))

    assert attendance_repo.active_count(1, DAY) == 0
    audit_repo.fail_with = None
    assert service.clock_in(employee_session, 1, timestamp=at(9, 0)).record_id is not None


def test_failed_audit_write_leaves_day_open(service, employee_session, audit_repo):
    service.clock_in(employee_session, 1, timestamp=at(9, 0))
    audit_repo.fail_with = RuntimeError("audit log unavailable")

    with pytest.raises(RuntimeError):
        service.clock_out(employee_session, 1, timestamp=at(17, 0))

    assert service.today_status(employee_session, on=DAY).status == TodayStatus.IN


def test_reads_are_scoped_to_the_caller(service, employee_session, supervisor_session):
    other = service.clock_in(supervisor_session, 2, timestamp=at(14, 0))

    with pytest.raises(AuthorizationError):
        service.get_record(employee_session, other.record_id)
    with pytest.raises(AuthorizationError):
        service.today_status(employee_session, 2, on=DAY)
    with pytest.raises(AuthorizationError):
        service.history(employee_session, 2)

    assert service.get_record(supervisor_session, other.record_id) == other
    assert service.today_status(supervisor_session, 2, on=DAY).status == TodayStatus.IN
    assert service.history(supervisor_session, 2) == [other]
