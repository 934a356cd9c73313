from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.enums import EmploymentType


@dataclass(frozen=True)
class Employee:
    """Employee reference data with the assigned working schedule.

    Read-only for the engine; owned by personnel management.
    """

    employee_id: int
    display_name: str
    employment_type: EmploymentType
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    department: Optional[str] = None
