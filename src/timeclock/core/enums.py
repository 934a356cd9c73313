from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role used for authorization of engine operations."""

    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"


class AttendanceState(str, Enum):
    """Primary lifecycle state of an employee-day. Deletion is tracked separately."""

    ABSENT = "ABSENT"
    CLOCKED_IN = "CLOCKED_IN"
    COMPLETED = "COMPLETED"


class ClockEventKind(str, Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class TodayStatus(str, Enum):
    """Status shown by the clock-in/out screen."""

    OUT = "OUT"
    IN = "IN"
    COMPLETE = "COMPLETE"


class AuditAction(str, Enum):
    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    INCIDENT = "INCIDENT"
    CORRECT = "CORRECT"
    DELETE = "DELETE"
    RESTORE = "RESTORE"
    PURGE = "PURGE"
