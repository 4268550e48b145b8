from __future__ import annotations

from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO date-time string (seconds optional) into a naive datetime."""
    return datetime.fromisoformat(value.strip())


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def now_local() -> datetime:
    """Current local time, behind a function so tests can patch it."""
    return datetime.now()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def as_range_start(value: date | datetime) -> datetime:
    """A bare date means the start of that day."""
    if isinstance(value, datetime):
        return value
    return start_of_day(value)


def as_range_end(value: date | datetime) -> datetime:
    """A bare date means the end of that day (date-only pickers)."""
    if isinstance(value, datetime):
        return value
    return end_of_day(value)


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_start(day: date) -> date:
    return day.replace(day=1)


def hours_between(start: datetime, stop: datetime) -> float:
    """Elapsed hours, never negative."""
    return max((stop - start).total_seconds(), 0.0) / 3600.0


def format_hms(hours: float) -> str:
    """Format hours as "Hh MMm SSs"."""
    total_seconds = int(round(max(hours, 0.0) * 3600))
    h, rem = divmod(total_seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h}h {m:02d}m {s:02d}s"
