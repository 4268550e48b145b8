from __future__ import annotations

from .base import PayrollCalculator
from ...attendance.model import RangeTotals


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: worked hours * rate, not below 0, rounded to cents.

    Breaks are paid, so they are already inside ``worked_hours``.
    """

    def earnings(self, totals: RangeTotals, hourly_rate: float) -> float:
        amount = float(totals.worked_hours) * float(hourly_rate or 0)
        return round(max(amount, 0.0), 2)
