from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.enums import parse_event_kind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import PunchEvent, StoredPunchEvent
from .repository import PunchLogRepository


def _new_event_id() -> str:
    return uuid.uuid4().hex


def _row_to_event(r: dict) -> PunchEvent:
    return PunchEvent(
        timestamp=r["occurred_at"],
        kind=parse_event_kind(r["kind"]),
        event_id=r.get("event_id"),
    )


class MySQLPunchLogRepository(PunchLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_full_log(self, employee_id: int) -> Sequence[PunchEvent]:
        return [s.event for s in self.get_stored_log(employee_id)]

    def get_stored_log(self, employee_id: int) -> Sequence[StoredPunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT seq, event_id, occurred_at, kind
                FROM punch_events
                WHERE employee_id=%s
                ORDER BY seq ASC
                """,
                (int(employee_id),),
            )
            rows = fetchall(cur)
            return [StoredPunchEvent(index=i, event=_row_to_event(r)) for i, r in enumerate(rows)]

    def append_event(self, employee_id: int, event: PunchEvent) -> PunchEvent:
        event_id = event.event_id or _new_event_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO punch_events(event_id, employee_id, occurred_at, kind)
                VALUES(%s,%s,%s,%s)
                """,
                (event_id, int(employee_id), event.timestamp, event.kind.value),
            )
        return PunchEvent(timestamp=event.timestamp, kind=event.kind, event_id=event_id)

    @staticmethod
    def _seq_at(cur, employee_id: int, index: int) -> Optional[int]:
        if index < 0:
            return None
        cur.execute(
            """
            SELECT seq FROM punch_events
            WHERE employee_id=%s
            ORDER BY seq ASC
            LIMIT 1 OFFSET %s
            FOR UPDATE
            """,
            (int(employee_id), int(index)),
        )
        row = cur.fetchone()
        return int(row["seq"]) if row else None

    def replace_event_at(self, employee_id: int, index: int, event: PunchEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            seq = self._seq_at(cur, employee_id, index)
            if seq is None:
                return False
            cur.execute(
                """
                UPDATE punch_events
                SET occurred_at=%s, kind=%s, event_id=COALESCE(event_id, %s)
                WHERE seq=%s
                """,
                (event.timestamp, event.kind.value, _new_event_id(), seq),
            )
            return cur.rowcount > 0

    def delete_event_at(self, employee_id: int, index: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            seq = self._seq_at(cur, employee_id, index)
            if seq is None:
                return False
            cur.execute("DELETE FROM punch_events WHERE seq=%s", (seq,))
            return cur.rowcount > 0

    def replace_event(self, employee_id: int, event_id: str, event: PunchEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE punch_events
                SET occurred_at=%s, kind=%s
                WHERE employee_id=%s AND event_id=%s
                """,
                (event.timestamp, event.kind.value, int(employee_id), event_id),
            )
            return cur.rowcount > 0

    def delete_event(self, employee_id: int, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM punch_events WHERE employee_id=%s AND event_id=%s",
                (int(employee_id), event_id),
            )
            return cur.rowcount > 0
