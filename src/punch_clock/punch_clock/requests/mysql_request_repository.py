from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_REQUEST_LIMIT
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import HolidayRequest
from .repository import HolidayRequestRepository

_SELECT = """
    SELECT r.request_id, r.employee_id, e.name AS employee_name,
           r.start_date, r.end_date, r.reason, r.status,
           r.submitted_at, r.reviewed_at, r.reviewed_by, r.admin_notes
    FROM holiday_requests r
    JOIN employees e ON e.employee_id = r.employee_id
"""


def _row_to_request(r: dict) -> HolidayRequest:
    return HolidayRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        submitted_at=r["submitted_at"],
        reviewed_at=r.get("reviewed_at"),
        reviewed_by=r.get("reviewed_by"),
        admin_notes=r.get("admin_notes"),
    )


class MySQLHolidayRequestRepository(HolidayRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        submitted_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holiday_requests(employee_id, start_date, end_date, reason, status, submitted_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), start_date, end_date, reason, RequestStatus.PENDING.value, submitted_at),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[HolidayRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE r.request_id=%s", (int(request_id),))
            row = fetchone(cur)
            return _row_to_request(row) if row else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = DEFAULT_REQUEST_LIMIT,
    ) -> Sequence[HolidayRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("r.employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("r.end_date>=%s")
            params.append(start)
        if end is not None:
            clauses.append("r.start_date<=%s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY r.submitted_at DESC, r.request_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE holiday_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, admin_notes=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    reviewed_by,
                    reviewed_at,
                    admin_notes,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
