from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.reducer import aggregate_day, aggregate_range, sessions_for_day
from ..attendance.repository import PunchLogRepository
from ..common.datetime_utils import format_hms, iter_days, month_start
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..users.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    series: list[dict]


class PayrollReportService:
    def __init__(
        self,
        punch_logs: PunchLogRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._logs = punch_logs
        self._employees = employees
        self._calculator = calculator or StandardPayrollCalculator()

    def build_range_report(
        self,
        *,
        start: date,
        end: date,
        now: datetime,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        """Per-employee totals and a zero-filled per-day series for ``[start, end]``.

        ``actions`` in the series counts work sessions started that day.
        """
        if start > end:
            raise ValidationError("Start date cannot be after end date")

        if employee_id is not None:
            emp = self._employees.get_by_id(int(employee_id))
            if not emp or emp.is_admin:
                raise NotFoundError("Employee not found")
            employees = [emp]
        else:
            employees = list(self._employees.list_employees())

        days = list(iter_days(start, end))
        series_map = {
            d: {"date": d.isoformat(), "actions": 0, "hours": 0.0, "break_hours": 0.0, "break_count": 0, "amount": 0.0}
            for d in days
        }
        rows: list[dict] = []

        for emp in employees:
            events = self._logs.get_full_log(emp.employee_id)
            totals = aggregate_range(events, start, end, now=now)
            rows.append(
                {
                    "employee_id": emp.employee_id,
                    "name": emp.name,
                    "secret_code": emp.secret_code,
                    "hourly_rate": emp.hourly_rate,
                    "cached_amount": emp.cached_amount,
                    "worked_hours": round(totals.worked_hours, 2),
                    "worked": format_hms(totals.worked_hours),
                    "break_hours": round(totals.break_hours, 2),
                    "break_count": totals.break_count,
                    "amount": self._calculator.earnings(totals, emp.hourly_rate),
                }
            )

            for d in days:
                day_totals = aggregate_day(events, d, now=now)
                bucket = series_map[d]
                bucket["actions"] += sum(1 for s in sessions_for_day(events, d) if not s.unmatched)
                bucket["hours"] += day_totals.worked_hours
                bucket["break_hours"] += day_totals.break_hours
                bucket["break_count"] += day_totals.break_count
                bucket["amount"] += self._calculator.earnings(day_totals, emp.hourly_rate)

        series = []
        for d in days:
            b = series_map[d]
            series.append(
                {
                    **b,
                    "hours": round(b["hours"], 2),
                    "break_hours": round(b["break_hours"], 2),
                    "amount": round(max(b["amount"], 0.0), 2),
                }
            )

        rows.sort(key=lambda r: r["worked_hours"], reverse=True)
        return ReportData(rows=rows, series=series)

    def refresh_cached_amounts(self, *, now: datetime) -> int:
        """Recompute this month's earned amount per employee; returns how many changed.

        A failing employee is logged and skipped so the rest still refresh.
        """
        changed = 0
        first = month_start(now.date())
        for emp in self._employees.list_employees():
            try:
                totals = aggregate_range(self._logs.get_full_log(emp.employee_id), first, now.date(), now=now)
                amount = self._calculator.earnings(totals, emp.hourly_rate)
                if round(emp.cached_amount, 2) != amount:
                    self._employees.update_cached_amount(emp.employee_id, amount)
                    changed += 1
            except DomainError:
                logger.exception("Failed to refresh cached amount for employee %s", emp.employee_id)
        if changed:
            logger.info("Refreshed cached amounts for %s employees", changed)
        return changed
