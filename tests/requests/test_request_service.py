from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from punch_clock.core.enums import RequestStatus
from punch_clock.core.exceptions import NotFoundError, ValidationError
from punch_clock.requests.model import HolidayRequest
from punch_clock.requests.service import HolidayRequestService


class FakeHolidayRepo:
    def __init__(self, employees):
        self._employees = employees
        self._next_id = 1
        self._items: dict[int, HolidayRequest] = {}

    def create(self, *, employee_id, start_date, end_date, reason, submitted_at):
        rid = self._next_id
        self._next_id += 1
        self._items[rid] = HolidayRequest(
            request_id=rid,
            employee_id=employee_id,
            employee_name=self._employees.get_by_id(employee_id).name,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            submitted_at=submitted_at,
        )
        return rid

    def get(self, request_id):
        return self._items.get(int(request_id))

    def list_requests(self, *, status=None, employee_id=None, start=None, end=None, limit=500):
        out = list(self._items.values())
        if status is not None:
            out = [r for r in out if r.status == status]
        if employee_id is not None:
            out = [r for r in out if r.employee_id == employee_id]
        if start is not None:
            out = [r for r in out if r.end_date >= start]
        if end is not None:
            out = [r for r in out if r.start_date <= end]
        return sorted(out, key=lambda r: r.submitted_at, reverse=True)[:limit]

    def decide(self, *, request_id, status, reviewed_by, reviewed_at, admin_notes=None):
        req = self._items.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self._items[req.request_id] = replace(
            req, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, admin_notes=admin_notes
        )
        return True


@pytest.fixture
def repo(employees_repo) -> FakeHolidayRepo:
    return FakeHolidayRepo(employees_repo)


@pytest.fixture
def svc(repo, employees_repo) -> HolidayRequestService:
    return HolidayRequestService(repo, employees_repo)


def submit(svc, code, start, end, reason="Trip", now=datetime(2026, 2, 1, 10, 0)):
    return svc.submit(secret_code=code, start_date=start, end_date=end, reason=reason, now=now)


def test_submit_creates_pending_request(svc, alice):
    req = submit(svc, alice.secret_code, date(2026, 3, 2), date(2026, 3, 6))

    assert req.status == RequestStatus.PENDING
    assert req.employee_name == "Alice"
    assert req.days == 5


@pytest.mark.parametrize(
    "code, start, end, reason, message",
    [
        ("", date(2026, 3, 2), date(2026, 3, 3), "Trip", "Secret code is required"),
        ("123", date(2026, 3, 2), date(2026, 3, 3), "Trip", "exactly 8 digits"),
        ("12345678", None, date(2026, 3, 3), "Trip", "Start date is required"),
        ("12345678", date(2026, 3, 2), None, "Trip", "End date is required"),
        ("12345678", date(2026, 3, 4), date(2026, 3, 3), "Trip", "cannot be after"),
        ("12345678", date(2026, 3, 2), date(2026, 3, 3), "  ", "Reason is required"),
        ("11111111", date(2026, 3, 2), date(2026, 3, 3), "Trip", "Invalid secret code"),
    ],
)
def test_submit_validation(svc, code, start, end, reason, message):
    with pytest.raises(ValidationError, match=message):
        submit(svc, code, start, end, reason)


def test_approve_then_cannot_decide_again(svc, repo, alice):
    req = submit(svc, alice.secret_code, date(2026, 3, 2), date(2026, 3, 6))

    svc.approve(req.request_id, reviewed_by="Admin", notes=" enjoy ", now=datetime(2026, 2, 2, 9, 0))
    saved = repo.get(req.request_id)

    assert saved.status == RequestStatus.APPROVED
    assert saved.reviewed_by == "Admin"
    assert saved.admin_notes == "enjoy"
    with pytest.raises(ValidationError, match="already been processed"):
        svc.reject(req.request_id, now=datetime(2026, 2, 2, 9, 5))


def test_reject_unknown_request(svc):
    with pytest.raises(NotFoundError):
        svc.reject(42, now=datetime(2026, 2, 2, 9, 0))


def test_listing_filters_and_counts(svc, alice, bob):
    a = submit(svc, alice.secret_code, date(2026, 3, 2), date(2026, 3, 6))
    submit(svc, bob.secret_code, date(2026, 4, 1), date(2026, 4, 2), now=datetime(2026, 2, 3, 10, 0))
    svc.reject(a.request_id, now=datetime(2026, 2, 2, 9, 0))

    assert [r.employee_name for r in svc.list_requests(status=RequestStatus.PENDING)] == ["Bob"]
    assert [r.employee_name for r in svc.list_requests(start=date(2026, 3, 5), end=date(2026, 3, 31))] == ["Alice"]
    assert [r.request_id for r in svc.list_for_secret_code(alice.secret_code)] == [a.request_id]
    assert svc.status_counts() == {"PENDING": 1, "APPROVED": 0, "REJECTED": 1}
