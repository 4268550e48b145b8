from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_HOURLY_RATE
from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: Pure data object; the punch log is read separately through
    the punch-log repository.
    """

    employee_id: int
    name: str
    secret_code: str
    hourly_rate: float = DEFAULT_HOURLY_RATE
    cached_amount: float = 0.0
    role: Role = Role.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
