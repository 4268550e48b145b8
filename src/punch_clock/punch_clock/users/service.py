from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_non_negative, require_secret_code
from ..core.constants import DEFAULT_HOURLY_RATE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: manage the employee roster and the admin record."""

    def __init__(self, employees: EmployeeRepository, *, default_hourly_rate: float = DEFAULT_HOURLY_RATE):
        self._employees = employees
        self._default_hourly_rate = float(default_hourly_rate)

    def _ensure_code_free(self, secret_code: str, *, exclude_id: Optional[int] = None) -> None:
        holder = self._employees.find_by_secret_code(secret_code)
        if holder and holder.employee_id != exclude_id:
            raise ValidationError("Secret code is already in use")

    def get_employee(self, employee_id: int) -> Employee:
        emp = self._employees.get_by_id(int(employee_id))
        if not emp or emp.is_admin:
            raise NotFoundError("Employee not found")
        return emp

    def find_by_secret_code(self, secret_code: str) -> Employee:
        """Resolve a typed code to its owner (admin included)."""
        code = require_secret_code(secret_code)
        emp = self._employees.find_by_secret_code(code)
        if not emp:
            raise ValidationError("Invalid code. Please try again.")
        return emp

    def list_employees(self, *, search: str = "") -> Sequence[Employee]:
        return self._employees.list_employees(search=(search or "").strip())

    def create_employee(self, *, name: str, secret_code: str, hourly_rate=None) -> Employee:
        name = require_non_empty(name, "Name")
        code = require_secret_code(secret_code)
        rate = self._default_hourly_rate if hourly_rate in (None, "") else require_non_negative(hourly_rate, "Hourly rate")
        self._ensure_code_free(code)

        employee_id = self._employees.create_employee(name=name, secret_code=code, hourly_rate=rate)
        logger.info("Created employee %s (%s)", employee_id, name)
        return Employee(employee_id=employee_id, name=name, secret_code=code, hourly_rate=rate)

    def update_employee(self, employee_id: int, *, name: str, secret_code: str, hourly_rate) -> Employee:
        current = self.get_employee(employee_id)
        name = require_non_empty(name, "Name")
        code = require_secret_code(secret_code)
        rate = require_non_negative(hourly_rate, "Hourly rate")
        self._ensure_code_free(code, exclude_id=current.employee_id)

        if not self._employees.update_employee(current.employee_id, name=name, secret_code=code, hourly_rate=rate):
            raise ValidationError("Failed to update employee")
        logger.info("Updated employee %s", current.employee_id)
        return Employee(
            employee_id=current.employee_id,
            name=name,
            secret_code=code,
            hourly_rate=rate,
            cached_amount=current.cached_amount,
            role=current.role,
        )

    def delete_employee(self, employee_id: int) -> None:
        emp = self._employees.get_by_id(int(employee_id))
        if not emp:
            raise NotFoundError("Employee not found")
        if emp.is_admin:
            raise ValidationError("The admin record cannot be deleted")
        if not self._employees.delete_by_id(emp.employee_id):
            raise ValidationError("Failed to delete employee")
        logger.info("Deleted employee %s (%s)", emp.employee_id, emp.name)

    def get_admin(self) -> Employee:
        admin = self._employees.get_admin()
        if not admin:
            raise NotFoundError("Admin profile not found.")
        return admin

    def authenticate_admin(self, secret_code: str) -> Employee:
        code = require_secret_code(secret_code)
        emp = self._employees.find_by_secret_code(code)
        if not emp or emp.role != Role.ADMIN:
            raise AuthorizationError("Invalid admin code")
        return emp

    def update_admin_settings(self, *, name: str, secret_code: str) -> Employee:
        admin = self.get_admin()
        name = require_non_empty(name, "Name")
        code = require_secret_code(secret_code)
        self._ensure_code_free(code, exclude_id=admin.employee_id)

        if not self._employees.update_employee(
            admin.employee_id, name=name, secret_code=code, hourly_rate=admin.hourly_rate
        ):
            raise ValidationError("Failed to update profile.")
        logger.info("Updated admin settings")
        return Employee(
            employee_id=admin.employee_id,
            name=name,
            secret_code=code,
            hourly_rate=admin.hourly_rate,
            cached_amount=admin.cached_amount,
            role=Role.ADMIN,
        )
