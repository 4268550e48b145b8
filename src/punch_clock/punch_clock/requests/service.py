from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_secret_code
from ..core.constants import ADMIN_NAME
from ..core.enums import RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import EmployeeRepository
from .model import HolidayRequest
from .repository import HolidayRequestRepository

logger = logging.getLogger(__name__)


class HolidayRequestService:
    def __init__(self, requests: HolidayRequestRepository, employees: EmployeeRepository):
        self._requests = requests
        self._employees = employees

    def _employee_for_code(self, secret_code: str):
        code = require_secret_code(secret_code)
        emp = self._employees.find_by_secret_code(code)
        if not emp or emp.is_admin:
            raise ValidationError("Invalid secret code. Please check your code and try again.")
        return emp

    def submit(
        self,
        *,
        secret_code: str,
        start_date: Optional[date],
        end_date: Optional[date],
        reason: str,
        now: datetime,
    ) -> HolidayRequest:
        code = require_secret_code(secret_code)
        if start_date is None:
            raise ValidationError("Start date is required")
        if end_date is None:
            raise ValidationError("End date is required")
        if start_date > end_date:
            raise ValidationError("Start date cannot be after end date")
        reason = require_non_empty(reason, "Reason")

        emp = self._employee_for_code(code)
        request_id = self._requests.create(
            employee_id=emp.employee_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            submitted_at=now,
        )
        logger.info("Employee %s submitted holiday request %s", emp.employee_id, request_id)
        return HolidayRequest(
            request_id=request_id,
            employee_id=emp.employee_id,
            employee_name=emp.name,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            submitted_at=now,
        )

    def _decide(
        self,
        request_id: int,
        status: RequestStatus,
        *,
        reviewed_by: str,
        notes: str,
        now: datetime,
    ) -> None:
        req = self._requests.get(int(request_id))
        if not req:
            raise NotFoundError("Holiday request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Request has already been processed")

        ok = self._requests.decide(
            request_id=int(request_id),
            status=status,
            reviewed_by=(reviewed_by or "").strip() or ADMIN_NAME,
            reviewed_at=now,
            admin_notes=(notes or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Failed to process request. Please try again.")
        logger.info("Holiday request %s %s", request_id, status.value.lower())

    def approve(self, request_id: int, *, reviewed_by: str = ADMIN_NAME, notes: str = "", now: datetime) -> None:
        self._decide(request_id, RequestStatus.APPROVED, reviewed_by=reviewed_by, notes=notes, now=now)

    def reject(self, request_id: int, *, reviewed_by: str = ADMIN_NAME, notes: str = "", now: datetime) -> None:
        self._decide(request_id, RequestStatus.REJECTED, reviewed_by=reviewed_by, notes=notes, now=now)

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[HolidayRequest]:
        if start is not None and end is not None and start > end:
            raise ValidationError("Start date cannot be after end date")
        return self._requests.list_requests(status=status, employee_id=employee_id, start=start, end=end)

    def list_for_secret_code(self, secret_code: str) -> Sequence[HolidayRequest]:
        emp = self._employee_for_code(secret_code)
        return self._requests.list_requests(employee_id=emp.employee_id)

    def status_counts(self) -> dict[str, int]:
        counts = Counter(r.status.value for r in self._requests.list_requests())
        return {s.value: counts.get(s.value, 0) for s in RequestStatus}
