"""Attendance state reduction.

Pure functions over one employee's punch log: session reconstruction,
live state, range aggregation and forgotten-stop detection. Nothing here
reads the clock; callers pass ``now``/``today`` explicitly. Malformed or
sparse logs never raise: orphan stops are dropped, superseded starts are
kept as unmatched sessions.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from itertools import groupby
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import as_range_end, as_range_start, end_of_day, hours_between
from ..core.enums import AnomalyKind, EventKind
from .legacy import upgrade_legacy_log
from .model import (
    BreakInterval,
    ForgottenStop,
    LiveState,
    PunchEvent,
    RangeTotals,
    ReconstructedLog,
    WorkSession,
)

logger = logging.getLogger(__name__)


class _SessionBuilder:
    __slots__ = ("start", "start_event_id", "stop", "stop_event_id", "unmatched", "breaks", "legacy")

    def __init__(self, start: datetime, start_event_id: Optional[str], legacy: bool = False):
        self.start = start
        self.start_event_id = start_event_id
        self.stop: Optional[datetime] = None
        self.stop_event_id: Optional[str] = None
        self.unmatched = False
        self.breaks: list[BreakInterval] = []
        self.legacy = legacy

    def build(self) -> WorkSession:
        return WorkSession(
            start=self.start,
            stop=self.stop,
            breaks=tuple(self.breaks),
            unmatched=self.unmatched,
            start_event_id=self.start_event_id,
            stop_event_id=self.stop_event_id,
        )


def _reconstruct(events: Iterable[PunchEvent]) -> ReconstructedLog:
    raw = sorted(events, key=lambda e: e.timestamp)
    built: list[_SessionBuilder] = []
    loose: list[BreakInterval] = []
    pending_work: Optional[_SessionBuilder] = None
    # (break start, session open when the break started, came from a legacy punch)
    pending_break: Optional[tuple[datetime, Optional[_SessionBuilder], bool]] = None
    orphan_stops = 0

    def settle_break(stop: Optional[datetime], *, unmatched: bool) -> None:
        start, owner, _ = pending_break
        interval = BreakInterval(start=start, stop=stop, unmatched=unmatched)
        if owner is not None:
            owner.breaks.append(interval)
        else:
            loose.append(interval)

    for stored, e in zip(raw, upgrade_legacy_log(raw)):
        day = e.timestamp.date()
        # Legacy punches only pair within their own day; whatever a legacy
        # day left open stays open and does not absorb later punches.
        if pending_work is not None and pending_work.legacy and pending_work.start.date() < day:
            pending_work = None
        if pending_break is not None and pending_break[2] and pending_break[0].date() < day:
            settle_break(None, unmatched=False)
            pending_break = None

        if e.kind == EventKind.START_WORK:
            if pending_work is not None:
                pending_work.unmatched = True
            pending_work = _SessionBuilder(e.timestamp, e.event_id, stored.is_legacy)
            built.append(pending_work)
        elif e.kind == EventKind.STOP_WORK:
            if pending_work is None:
                orphan_stops += 1
                logger.debug("Dropping STOP_WORK at %s with no open session", e.timestamp)
                continue
            if pending_break is not None and pending_break[1] is pending_work:
                # Stopping work from a break ends the break too.
                settle_break(e.timestamp, unmatched=False)
                pending_break = None
            pending_work.stop = e.timestamp
            pending_work.stop_event_id = e.event_id
            pending_work = None
        elif e.kind == EventKind.START_BREAK:
            if pending_break is not None:
                settle_break(None, unmatched=True)
            pending_break = (e.timestamp, pending_work, stored.is_legacy)
        elif e.kind == EventKind.STOP_BREAK:
            if pending_break is None:
                orphan_stops += 1
                logger.debug("Dropping STOP_BREAK at %s with no open break", e.timestamp)
                continue
            settle_break(e.timestamp, unmatched=False)
            pending_break = None

    pending_break_start = None
    if pending_break is not None:
        pending_break_start = pending_break[0]
        settle_break(None, unmatched=False)

    return ReconstructedLog(
        sessions=tuple(b.build() for b in built),
        pending_work_start=pending_work.start if pending_work is not None else None,
        pending_break_start=pending_break_start,
        orphan_stops=orphan_stops,
        loose_breaks=tuple(loose),
    )


def reconstruct_sessions(events: Iterable[PunchEvent]) -> ReconstructedLog:
    """Pair starts and stops of the whole log into work sessions with nested breaks."""
    return _reconstruct(events)


def sessions_in_range(events: Iterable[PunchEvent], start: date | datetime, end: date | datetime) -> tuple[WorkSession, ...]:
    """Sessions whose *start* falls in the inclusive range, wherever they stop."""
    lo, hi = as_range_start(start), as_range_end(end)
    return tuple(s for s in reconstruct_sessions(events).sessions if lo <= s.start <= hi)


def sessions_for_day(events: Iterable[PunchEvent], day: date) -> tuple[WorkSession, ...]:
    return sessions_in_range(events, day, day)


def derive_live_state(events: Iterable[PunchEvent], today: Optional[date] = None) -> LiveState:
    """State implied by the last event of the log.

    Legacy IN/OUT punches only describe their own day: when the log ends on
    a legacy punch dated before ``today`` the employee is idle.
    """
    raw = sorted(events, key=lambda e: e.timestamp)
    if not raw:
        return LiveState()
    if today is not None and raw[-1].is_legacy and raw[-1].timestamp.date() < today:
        return LiveState()

    last = upgrade_legacy_log(raw)[-1]
    is_working = last.kind in (EventKind.START_WORK, EventKind.STOP_BREAK)
    is_on_break = last.kind == EventKind.START_BREAK
    return LiveState(
        is_working=is_working,
        is_on_break=is_on_break,
        last_action=last.kind,
        last_action_time=last.timestamp,
    )


def _open_session_cap(start: datetime, range_end: datetime, now: datetime) -> datetime:
    cap = min(now, range_end)
    if start.date() < now.date():
        # Abandoned clock-ins stop counting at the end of their own day.
        cap = min(cap, end_of_day(start.date()))
    return cap


def _day_bucketed_breaks(ordered: Sequence[PunchEvent], lo: datetime, hi: datetime, now: datetime) -> tuple[float, int]:
    in_range = [e for e in ordered if lo <= e.timestamp <= hi]
    hours = 0.0
    count = 0
    for day, day_events in groupby(in_range, key=lambda e: e.timestamp.date()):
        pending: Optional[datetime] = None
        for e in day_events:
            if e.kind == EventKind.START_BREAK:
                if pending is None:
                    pending = e.timestamp
                count += 1
            elif e.kind in (EventKind.STOP_BREAK, EventKind.STOP_WORK) and pending is not None:
                hours += hours_between(pending, e.timestamp)
                pending = None
        if pending is not None:
            hours += hours_between(pending, min(now, end_of_day(day), hi))
    return hours, count


def aggregate_range(
    events: Iterable[PunchEvent],
    start: date | datetime,
    end: date | datetime,
    *,
    now: datetime,
) -> RangeTotals:
    """Worked hours, break hours and break count for an inclusive range.

    Worked time follows the sessions that *start* in range (breaks are paid,
    so they are inside it). Break time uses a separate per-day pairing of
    break events that fall in range; the two can disagree at session
    boundaries.
    """
    lo, hi = as_range_start(start), as_range_end(end)
    events = list(events)
    ordered = upgrade_legacy_log(events)
    log = _reconstruct(events)

    worked = 0.0
    for s in log.sessions:
        if s.unmatched or not (lo <= s.start <= hi):
            continue
        stop = s.stop if s.stop is not None else _open_session_cap(s.start, hi, now)
        worked += hours_between(s.start, stop)

    break_hours, break_count = _day_bucketed_breaks(ordered, lo, hi, now)
    return RangeTotals(worked_hours=worked, break_hours=break_hours, break_count=break_count)


def aggregate_day(events: Iterable[PunchEvent], day: date, *, now: datetime) -> RangeTotals:
    return aggregate_range(events, day, day, now=now)


def detect_forgotten_stops(events: Iterable[PunchEvent], today: date) -> list[ForgottenStop]:
    """Starts with no matching stop later in the log, excluding today's."""
    log = reconstruct_sessions(events)
    found: list[ForgottenStop] = []

    def breaks_left_open(breaks: Iterable[BreakInterval]) -> None:
        for b in breaks:
            if b.unmatched or b.is_open:
                found.append(ForgottenStop(work_date=b.start.date(), kind=AnomalyKind.BREAK, started_at=b.start))

    for s in log.sessions:
        if s.unmatched or s.is_open:
            found.append(ForgottenStop(work_date=s.work_date, kind=AnomalyKind.WORK, started_at=s.start))
        breaks_left_open(s.breaks)
    breaks_left_open(log.loose_breaks)

    found = [f for f in found if f.work_date != today]
    found.sort(key=lambda f: f.started_at)
    return found
