from __future__ import annotations

from datetime import date, datetime

import pytest

from punch_clock.attendance.model import PunchEvent
from punch_clock.core.enums import EventKind
from punch_clock.core.exceptions import NotFoundError, ValidationError
from punch_clock.payroll.calculator.base import PayrollCalculator
from punch_clock.payroll.service import PayrollReportService

SW, SB, EB, EW = EventKind.START_WORK, EventKind.START_BREAK, EventKind.STOP_BREAK, EventKind.STOP_WORK


@pytest.fixture
def svc(punch_logs, employees_repo, alice, bob) -> PayrollReportService:
    for ts, kind in [("2026-02-02 09:00", SW), ("2026-02-02 12:00", SB), ("2026-02-02 12:30", EB), ("2026-02-02 17:00", EW)]:
        punch_logs.append_event(alice.employee_id, PunchEvent(datetime.fromisoformat(ts), kind))
    for ts, kind in [("2026-02-03 09:00", SW), ("2026-02-03 13:00", EW)]:
        punch_logs.append_event(bob.employee_id, PunchEvent(datetime.fromisoformat(ts), kind))
    return PayrollReportService(punch_logs, employees_repo)


def test_report_totals_per_employee(svc, fixed_now):
    report = svc.build_range_report(start=date(2026, 2, 2), end=date(2026, 2, 3), now=fixed_now)

    assert [r["name"] for r in report.rows] == ["Alice", "Bob"]
    alice, bob = report.rows
    assert alice["worked_hours"] == 8.0
    assert alice["worked"] == "8h 00m 00s"
    assert alice["break_hours"] == 0.5
    assert alice["break_count"] == 1
    assert alice["amount"] == 160.0
    assert bob["amount"] == 40.0


def test_report_daily_series_is_zero_filled(svc, fixed_now):
    report = svc.build_range_report(start=date(2026, 2, 1), end=date(2026, 2, 3), now=fixed_now)

    assert [d["date"] for d in report.series] == ["2026-02-01", "2026-02-02", "2026-02-03"]
    assert report.series[0] == {
        "date": "2026-02-01",
        "actions": 0,
        "hours": 0.0,
        "break_hours": 0.0,
        "break_count": 0,
        "amount": 0.0,
    }
    assert report.series[1]["actions"] == 1
    assert report.series[1]["hours"] == 8.0
    assert report.series[1]["amount"] == 160.0
    assert report.series[2]["amount"] == 40.0


def test_report_for_one_employee(svc, bob, fixed_now):
    report = svc.build_range_report(start=date(2026, 2, 1), end=date(2026, 2, 4), now=fixed_now, employee_id=bob.employee_id)

    assert [r["name"] for r in report.rows] == ["Bob"]
    assert sum(d["hours"] for d in report.series) == 4.0


def test_report_rejects_bad_input(svc, admin, fixed_now):
    with pytest.raises(ValidationError):
        svc.build_range_report(start=date(2026, 2, 4), end=date(2026, 2, 1), now=fixed_now)
    with pytest.raises(NotFoundError):
        svc.build_range_report(start=date(2026, 2, 1), end=date(2026, 2, 4), now=fixed_now, employee_id=admin.employee_id)


def test_refresh_cached_amounts_writes_only_changes(svc, employees_repo, alice, fixed_now):
    assert svc.refresh_cached_amounts(now=fixed_now) == 2
    assert employees_repo.get_by_id(alice.employee_id).cached_amount == 160.0

    assert svc.refresh_cached_amounts(now=fixed_now) == 0
    assert len(employees_repo.cached_updates) == 2


class FlatBonusCalculator(PayrollCalculator):
    def earnings(self, totals, hourly_rate):
        return 100.0 if totals.worked_hours > 0 else 0.0


def test_daily_series_amount_uses_the_calculator(punch_logs, employees_repo, alice, fixed_now):
    for ts, kind in [("2026-02-02 09:00", SW), ("2026-02-02 17:00", EW)]:
        punch_logs.append_event(alice.employee_id, PunchEvent(datetime.fromisoformat(ts), kind))
    svc = PayrollReportService(punch_logs, employees_repo, calculator=FlatBonusCalculator())

    report = svc.build_range_report(start=date(2026, 2, 2), end=date(2026, 2, 3), now=fixed_now)

    assert [d["amount"] for d in report.series] == [100.0, 0.0]
    assert report.rows[0]["amount"] == 100.0
