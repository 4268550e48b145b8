from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from ..core.enums import EventKind
from .model import PunchEvent

# Position of a legacy punch within its day, modulo 4 (1-indexed).
_ROLE_BY_POSITION = {
    1: EventKind.START_WORK,
    2: EventKind.START_BREAK,
    3: EventKind.STOP_BREAK,
    0: EventKind.STOP_WORK,
}


def upgrade_legacy_log(events: Iterable[PunchEvent]) -> list[PunchEvent]:
    """Rewrite two-kind (IN/OUT) punches as four-kind events.

    The stored IN/OUT label is ignored: the n-th legacy punch of a calendar
    day is a work start, break start, break stop or work stop according to
    ``n mod 4``. Four-kind events pass through untouched. Result is in
    chronological order.
    """
    ordered = sorted(events, key=lambda e: e.timestamp)
    if not any(e.is_legacy for e in ordered):
        return ordered

    position_in_day: dict[date, int] = defaultdict(int)
    out: list[PunchEvent] = []
    for e in ordered:
        if not e.is_legacy:
            out.append(e)
            continue
        day = e.timestamp.date()
        position_in_day[day] += 1
        role = _ROLE_BY_POSITION[position_in_day[day] % 4]
        out.append(PunchEvent(timestamp=e.timestamp, kind=role, event_id=e.event_id))
    return out
