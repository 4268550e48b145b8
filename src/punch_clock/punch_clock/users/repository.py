from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for employee records.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_secret_code(self, secret_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_employees(self, *, search: str = "") -> Sequence[Employee]:
        """Non-admin employees, optionally filtered on name or code."""

        raise NotImplementedError

    def get_admin(self) -> Optional[Employee]:
        raise NotImplementedError

    def create_employee(
        self,
        *,
        name: str,
        secret_code: str,
        hourly_rate: float,
        role: Role = Role.EMPLOYEE,
    ) -> int:
        raise NotImplementedError

    def update_employee(
        self,
        employee_id: int,
        *,
        name: str,
        secret_code: str,
        hourly_rate: float,
    ) -> bool:
        raise NotImplementedError

    def update_cached_amount(self, employee_id: int, amount: float) -> bool:
        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError
