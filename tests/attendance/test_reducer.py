from __future__ import annotations

from datetime import date, datetime

import pytest

from punch_clock.attendance.model import LiveState, PunchEvent, RangeTotals
from punch_clock.attendance.reducer import (
    aggregate_day,
    aggregate_range,
    derive_live_state,
    detect_forgotten_stops,
    reconstruct_sessions,
    sessions_for_day,
    sessions_in_range,
)
from punch_clock.core.enums import AnomalyKind, EventKind

SW, SB, EB, EW = EventKind.START_WORK, EventKind.START_BREAK, EventKind.STOP_BREAK, EventKind.STOP_WORK


def ev(ts: str, kind) -> PunchEvent:
    return PunchEvent(timestamp=datetime.fromisoformat(ts), kind=kind)


def test_alternating_pairs_give_closed_sessions_and_no_anomaly():
    events = []
    for d in (1, 2, 3):
        events += [ev(f"2026-02-0{d} 09:00", SW), ev(f"2026-02-0{d} 17:00", EW)]

    log = reconstruct_sessions(events)

    assert len(log.sessions) == 3
    assert all(s.stop is not None and not s.unmatched for s in log.sessions)
    assert log.pending_work_start is None
    assert detect_forgotten_stops(events, date(2026, 2, 4)) == []


def test_day_with_one_break(fixed_now):
    events = [
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 12:00", SB),
        ev("2026-02-02 12:30", EB),
        ev("2026-02-02 17:00", EW),
    ]

    totals = aggregate_day(events, date(2026, 2, 2), now=fixed_now)

    assert totals.worked_hours == pytest.approx(8.0)
    assert totals.break_hours == pytest.approx(0.5)
    assert totals.break_count == 1


def test_open_session_today_counts_up_to_now(fixed_now):
    events = [ev("2026-02-04 09:00", SW)]

    state = derive_live_state(events)
    totals = aggregate_day(events, fixed_now.date(), now=fixed_now)

    assert state.is_working and not state.is_on_break
    assert state.last_action == SW
    assert totals.worked_hours == pytest.approx(2.0)


def test_overnight_session_belongs_to_start_day(fixed_now):
    events = [ev("2026-02-02 22:00", SW), ev("2026-02-03 06:00", EW)]

    monday = aggregate_day(events, date(2026, 2, 2), now=fixed_now)
    tuesday = aggregate_day(events, date(2026, 2, 3), now=fixed_now)
    [session] = sessions_for_day(events, date(2026, 2, 2))

    assert monday.worked_hours == pytest.approx(8.0)
    assert tuesday.worked_hours == 0.0
    assert session.stopped_next_day


def test_forgotten_stop_from_yesterday():
    events = [ev("2026-02-03 09:00", SW)]

    found = detect_forgotten_stops(events, date(2026, 2, 4))

    assert len(found) == 1
    assert found[0].work_date == date(2026, 2, 3)
    assert found[0].kind == AnomalyKind.WORK
    assert derive_live_state(events).is_working


def test_open_start_of_today_is_not_an_anomaly():
    assert detect_forgotten_stops([ev("2026-02-04 09:00", SW)], date(2026, 2, 4)) == []


def test_orphan_stops_are_dropped():
    events = [
        ev("2026-02-02 08:00", EW),
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 10:00", EB),
        ev("2026-02-02 17:00", EW),
    ]

    log = reconstruct_sessions(events)

    assert log.orphan_stops == 2
    assert len(log.sessions) == 1
    assert log.sessions[0].start == datetime(2026, 2, 2, 9, 0)
    assert log.sessions[0].breaks == ()


def test_duplicate_start_closes_previous_as_unmatched(fixed_now):
    events = [ev("2026-02-02 09:00", SW), ev("2026-02-02 10:00", SW), ev("2026-02-02 12:00", EW)]

    log = reconstruct_sessions(events)
    totals = aggregate_day(events, date(2026, 2, 2), now=fixed_now)
    found = detect_forgotten_stops(events, fixed_now.date())

    assert [s.unmatched for s in log.sessions] == [True, False]
    assert totals.worked_hours == pytest.approx(2.0)
    assert [(f.kind, f.started_at) for f in found] == [(AnomalyKind.WORK, datetime(2026, 2, 2, 9, 0))]


def test_duplicate_break_start_is_reported():
    events = [
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 11:00", SB),
        ev("2026-02-02 12:00", SB),
        ev("2026-02-02 12:15", EB),
        ev("2026-02-02 17:00", EW),
    ]

    [session] = reconstruct_sessions(events).sessions
    found = detect_forgotten_stops(events, date(2026, 2, 4))

    assert [b.unmatched for b in session.breaks] == [True, False]
    assert [(f.kind, f.started_at) for f in found] == [(AnomalyKind.BREAK, datetime(2026, 2, 2, 11, 0))]


def test_day_bucketed_breaks_first_start_wins(fixed_now):
    events = [
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 11:00", SB),
        ev("2026-02-02 12:00", SB),
        ev("2026-02-02 12:15", EB),
        ev("2026-02-02 17:00", EW),
    ]

    totals = aggregate_day(events, date(2026, 2, 2), now=fixed_now)

    assert totals.break_hours == pytest.approx(1.25)
    assert totals.break_count == 2


def test_stop_work_while_on_break_is_accepted(fixed_now):
    events = [ev("2026-02-04 08:00", SW), ev("2026-02-04 09:00", SB), ev("2026-02-04 10:00", EW)]

    state = derive_live_state(events)
    totals = aggregate_day(events, fixed_now.date(), now=fixed_now)

    assert state == LiveState(False, False, EW, datetime(2026, 2, 4, 10, 0))
    assert totals.worked_hours == pytest.approx(2.0)


def test_dangling_break_today_counts_to_now(fixed_now):
    events = [ev("2026-02-04 09:00", SW), ev("2026-02-04 10:00", SB)]

    state = derive_live_state(events)
    totals = aggregate_day(events, fixed_now.date(), now=fixed_now)

    assert state.is_on_break and not state.is_working
    assert totals.break_hours == pytest.approx(1.0)
    assert totals.worked_hours == pytest.approx(2.0)


def test_abandoned_session_is_capped_at_end_of_its_day(fixed_now):
    events = [ev("2026-02-03 20:00", SW)]

    totals = aggregate_range(events, date(2026, 2, 3), date(2026, 2, 4), now=fixed_now)

    assert totals.worked_hours == pytest.approx(4.0, abs=1e-3)


def test_range_end_caps_open_session():
    now = datetime(2026, 2, 4, 18, 0)
    events = [ev("2026-02-04 09:00", SW)]

    totals = aggregate_range(events, datetime(2026, 2, 4, 0, 0), datetime(2026, 2, 4, 12, 0), now=now)

    assert totals.worked_hours == pytest.approx(3.0)


def test_range_filters_on_session_start():
    events = [
        ev("2026-02-01 22:00", SW),
        ev("2026-02-02 02:00", EW),
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 10:00", EW),
    ]

    sessions = sessions_in_range(events, date(2026, 2, 2), date(2026, 2, 2))

    assert [s.start for s in sessions] == [datetime(2026, 2, 2, 9, 0)]


def test_order_of_input_does_not_matter(fixed_now):
    events = [
        ev("2026-02-02 09:00", SW),
        ev("2026-02-02 12:00", SB),
        ev("2026-02-02 12:30", EB),
        ev("2026-02-02 17:00", EW),
    ]

    forward = aggregate_range(events, date(2026, 2, 1), date(2026, 2, 4), now=fixed_now)
    backward = aggregate_range(list(reversed(events)), date(2026, 2, 1), date(2026, 2, 4), now=fixed_now)

    assert forward == backward


def test_aggregation_is_idempotent_and_does_not_mutate_input(fixed_now):
    events = [ev("2026-02-04 09:00", SW), ev("2026-02-04 08:00", EW), ev("2026-02-04 10:00", SB)]
    snapshot = list(events)

    first = aggregate_range(events, date(2026, 2, 1), date(2026, 2, 4), now=fixed_now)
    second = aggregate_range(events, date(2026, 2, 1), date(2026, 2, 4), now=fixed_now)

    assert first == second
    assert events == snapshot


def test_no_negative_durations(fixed_now):
    # Break stop recorded before its start on the same day.
    events = [ev("2026-02-02 09:00", SW), ev("2026-02-02 09:30", EB), ev("2026-02-02 10:00", SB), ev("2026-02-02 09:45", EW)]

    totals = aggregate_day(events, date(2026, 2, 2), now=fixed_now)

    assert totals.worked_hours >= 0.0
    assert totals.break_hours >= 0.0


def test_empty_log():
    assert reconstruct_sessions([]).sessions == ()
    assert derive_live_state([]) == LiveState()
    assert aggregate_day([], date(2026, 2, 4), now=datetime(2026, 2, 4, 12, 0)) == RangeTotals()
    assert detect_forgotten_stops([], date(2026, 2, 4)) == []


def test_stop_work_from_break_on_a_past_day_closes_the_break(fixed_now):
    events = [ev("2026-02-02 08:00", SW), ev("2026-02-02 09:00", SB), ev("2026-02-02 10:00", EW)]

    [session] = reconstruct_sessions(events).sessions
    totals = aggregate_day(events, date(2026, 2, 2), now=fixed_now)

    assert session.breaks[0].stop == datetime(2026, 2, 2, 10, 0)
    assert reconstruct_sessions(events).pending_break_start is None
    assert detect_forgotten_stops(events, fixed_now.date()) == []
    assert not derive_live_state(events, fixed_now.date()).is_on_break
    assert totals.break_hours == pytest.approx(1.0)
    assert totals.worked_hours == pytest.approx(2.0)
