from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Employee


class ScheduleDirectory(Protocol):
    """Source of employee schedules and employment types."""

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_employees(self, employee_ids: Optional[Iterable[int]] = None) -> Sequence[Employee]:
        raise NotImplementedError
