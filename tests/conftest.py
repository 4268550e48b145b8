from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest

from punch_clock.attendance.model import PunchEvent, StoredPunchEvent
from punch_clock.core.enums import Role
from punch_clock.users.model import Employee


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._by_id: dict[int, Employee] = {e.employee_id: e for e in employees}
        self._next_id = max(self._by_id, default=0) + 1
        self.cached_updates: list[tuple[int, float]] = []

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def find_by_secret_code(self, secret_code: str) -> Optional[Employee]:
        for e in self._by_id.values():
            if e.secret_code == secret_code:
                return e
        return None

    def list_employees(self, *, search: str = ""):
        out = [e for e in self._by_id.values() if e.role != Role.ADMIN]
        if search:
            s = search.lower()
            out = [e for e in out if s in e.name.lower() or s in e.secret_code]
        return sorted(out, key=lambda e: (e.name, e.employee_id))

    def get_admin(self) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.role == Role.ADMIN), None)

    def create_employee(self, *, name, secret_code, hourly_rate, role=Role.EMPLOYEE) -> int:
        eid = self._next_id
        self._next_id += 1
        self._by_id[eid] = Employee(eid, name, secret_code, hourly_rate, 0.0, role)
        return eid

    def update_employee(self, employee_id, *, name, secret_code, hourly_rate) -> bool:
        e = self._by_id.get(int(employee_id))
        if not e:
            return False
        self._by_id[e.employee_id] = Employee(e.employee_id, name, secret_code, hourly_rate, e.cached_amount, e.role)
        return True

    def update_cached_amount(self, employee_id, amount) -> bool:
        e = self._by_id[int(employee_id)]
        self._by_id[e.employee_id] = Employee(e.employee_id, e.name, e.secret_code, e.hourly_rate, amount, e.role)
        self.cached_updates.append((e.employee_id, amount))
        return True

    def delete_by_id(self, employee_id) -> bool:
        return self._by_id.pop(int(employee_id), None) is not None


class InMemoryPunchLogs:
    def __init__(self, logs: Optional[dict[int, list[PunchEvent]]] = None):
        self._logs: dict[int, list[PunchEvent]] = {k: list(v) for k, v in (logs or {}).items()}
        self._next_id = 1

    def get_full_log(self, employee_id):
        return list(self._logs.get(int(employee_id), []))

    def get_stored_log(self, employee_id):
        return [StoredPunchEvent(i, e) for i, e in enumerate(self._logs.get(int(employee_id), []))]

    def append_event(self, employee_id, event):
        saved = PunchEvent(timestamp=event.timestamp, kind=event.kind, event_id=f"ev{self._next_id}")
        self._next_id += 1
        self._logs.setdefault(int(employee_id), []).append(saved)
        return saved

    def replace_event_at(self, employee_id, index, event):
        log = self._logs.get(int(employee_id), [])
        if not 0 <= index < len(log):
            return False
        log[index] = PunchEvent(event.timestamp, event.kind, log[index].event_id)
        return True

    def delete_event_at(self, employee_id, index):
        log = self._logs.get(int(employee_id), [])
        if not 0 <= index < len(log):
            return False
        del log[index]
        return True

    def replace_event(self, employee_id, event_id, event):
        log = self._logs.get(int(employee_id), [])
        for i, e in enumerate(log):
            if e.event_id == event_id:
                log[i] = PunchEvent(event.timestamp, event.kind, event_id)
                return True
        return False

    def delete_event(self, employee_id, event_id):
        log = self._logs.get(int(employee_id), [])
        for i, e in enumerate(log):
            if e.event_id == event_id:
                del log[i]
                return True
        return False


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 4, 11, 0, 0)


@pytest.fixture
def admin() -> Employee:
    return Employee(1, "Admin", "99999999", 0.0, 0.0, Role.ADMIN)


@pytest.fixture
def alice() -> Employee:
    return Employee(2, "Alice", "12345678", 20.0, 0.0, Role.EMPLOYEE)


@pytest.fixture
def bob() -> Employee:
    return Employee(3, "Bob", "87654321", 10.0, 0.0, Role.EMPLOYEE)


@pytest.fixture
def employees_repo(admin, alice, bob) -> InMemoryEmployees:
    return InMemoryEmployees([admin, alice, bob])


@pytest.fixture
def punch_logs() -> InMemoryPunchLogs:
    return InMemoryPunchLogs()
