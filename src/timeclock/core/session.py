from __future__ import annotations

from dataclasses import dataclass

from .enums import Role


@dataclass(frozen=True)
class SessionContext:
    """Identity of the caller, passed explicitly into every engine call."""

    actor_id: int
    role: Role

    @property
    def is_supervisor(self) -> bool:
        return self.role == Role.SUPERVISOR
