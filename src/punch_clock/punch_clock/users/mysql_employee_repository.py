from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, name, secret_code, hourly_rate, cached_amount, role"


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        name=row["name"],
        secret_code=row["secret_code"],
        hourly_rate=to_float(row.get("hourly_rate")),
        cached_amount=to_float(row.get("cached_amount")),
        role=Role(row.get("role") or Role.EMPLOYEE.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def find_by_secret_code(self, secret_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE secret_code=%s ORDER BY employee_id LIMIT 1",
                (secret_code,),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_employees(self, *, search: str = "") -> Sequence[Employee]:
        sql = f"SELECT {_COLUMNS} FROM employees WHERE role<>%s"
        params: list = [Role.ADMIN.value]
        if search:
            sql += " AND (name LIKE %s OR secret_code LIKE %s)"
            like = f"%{search}%"
            params.extend([like, like])
        sql += " ORDER BY name ASC, employee_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_employee(r) for r in fetchall(cur)]

    def get_admin(self) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE role=%s ORDER BY employee_id LIMIT 1",
                (Role.ADMIN.value,),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def create_employee(
        self,
        *,
        name: str,
        secret_code: str,
        hourly_rate: float,
        role: Role = Role.EMPLOYEE,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(name, secret_code, hourly_rate, cached_amount, role)
                VALUES(%s,%s,%s,0,%s)
                """,
                (name, secret_code, float(hourly_rate), role.value),
            )
            return int(cur.lastrowid)

    def update_employee(
        self,
        employee_id: int,
        *,
        name: str,
        secret_code: str,
        hourly_rate: float,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET name=%s, secret_code=%s, hourly_rate=%s
                WHERE employee_id=%s
                """,
                (name, secret_code, float(hourly_rate), int(employee_id)),
            )
            return cur.rowcount > 0

    def update_cached_amount(self, employee_id: int, amount: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET cached_amount=%s WHERE employee_id=%s",
                (float(amount), int(employee_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
