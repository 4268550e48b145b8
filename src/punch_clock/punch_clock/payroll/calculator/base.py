from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import RangeTotals


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def earnings(self, totals: RangeTotals, hourly_rate: float) -> float:
        raise NotImplementedError
