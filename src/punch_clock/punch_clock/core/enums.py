from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored on employee records."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EventKind(str, Enum):
    """Self-describing punch event kinds."""

    START_WORK = "START_WORK"
    START_BREAK = "START_BREAK"
    STOP_BREAK = "STOP_BREAK"
    STOP_WORK = "STOP_WORK"


class LegacyEventKind(str, Enum):
    """Two-kind punches from older logs; meaning depends on position in the day."""

    PUNCH_IN = "IN"
    PUNCH_OUT = "OUT"


class PunchAction(str, Enum):
    """What the punch-clock screen asks for."""

    PUNCH = "PUNCH"
    START_WORK = "START_WORK"
    STOP_WORK = "STOP_WORK"
    START_BREAK = "START_BREAK"
    STOP_BREAK = "STOP_BREAK"


class AnomalyKind(str, Enum):
    WORK = "work"
    BREAK = "break"


class DailyStatus(str, Enum):
    """Status key shown on the daily overview."""

    WORKING = "working"
    ON_BREAK = "on_break"
    COMPLETED = "completed"
    NOT_WORKING = "not_working"


class RequestStatus(str, Enum):
    """Holiday request review workflow."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def parse_event_kind(value: str) -> EventKind | LegacyEventKind:
    """Map a stored kind string to its enum; raises ValueError on unknown kinds."""
    v = (value or "").strip().upper()
    for kind_cls in (EventKind, LegacyEventKind):
        try:
            return kind_cls(v)
        except ValueError:
            continue
    raise ValueError(f"Unknown punch event kind: {value!r}")
