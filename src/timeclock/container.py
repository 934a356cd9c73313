from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.comparator import ScheduleComparator
from .attendance.factory import ComparisonStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.state_machine import AttendanceStateMachine
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .core.constants import DEFAULT_EARLY_EXIT_GRACE_MINUTES, DEFAULT_LATE_GRACE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .hours.aggregator import HoursAggregator, HoursTargets
from .hours.service import HoursSummaryService
from .schedules.mysql_schedule_repository import MySQLScheduleDirectory
from .schedules.repository import ScheduleDirectory


@dataclass(frozen=True)
class EngineSettings:
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    early_exit_grace_minutes: int = DEFAULT_EARLY_EXIT_GRACE_MINUTES
    hours_targets: Optional[Mapping[str, tuple]] = None


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    directory: ScheduleDirectory
    audit_repo: AuditRepository

    attendance_service: AttendanceService
    hours_service: HoursSummaryService


def build_services(
    *,
    attendance_repo: AttendanceRepository,
    directory: ScheduleDirectory,
    audit_repo: AuditRepository,
    settings: Optional[EngineSettings] = None,
) -> Container:
    """Wire services on top of already-built repositories (used by tests too)."""
    settings = settings or EngineSettings()

    comparator = ScheduleComparator(
        ComparisonStrategyFactory(
            late_grace_minutes=settings.late_grace_minutes,
            early_exit_grace_minutes=settings.early_exit_grace_minutes,
        )
    )
    attendance_service = AttendanceService(
        attendance_repo,
        directory,
        audit_repo,
        state_machine=AttendanceStateMachine(comparator),
    )
    targets = HoursTargets(dict(settings.hours_targets)) if settings.hours_targets else HoursTargets()
    hours_service = HoursSummaryService(attendance_repo, directory, aggregator=HoursAggregator(targets))

    return Container(
        attendance_repo=attendance_repo,
        directory=directory,
        audit_repo=audit_repo,
        attendance_service=attendance_service,
        hours_service=hours_service,
    )


def build_container(*, db_config: dict, settings: Optional[EngineSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        directory=MySQLScheduleDirectory(conn),
        audit_repo=MySQLAuditRepository(conn),
        settings=settings,
    )
