from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_REQUEST_LIMIT
from ..core.enums import RequestStatus
from .model import HolidayRequest


class HolidayRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        submitted_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[HolidayRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = DEFAULT_REQUEST_LIMIT,
    ) -> Sequence[HolidayRequest]:
        """Newest first. ``start``/``end`` keep requests overlapping that range."""

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_notes: Optional[str] = None,
    ) -> bool:
        """Only a PENDING request can be decided; returns False otherwise."""

        raise NotImplementedError
