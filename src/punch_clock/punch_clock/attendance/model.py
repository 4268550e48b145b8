from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Union

from ..core.enums import AnomalyKind, EventKind, LegacyEventKind

AnyEventKind = Union[EventKind, LegacyEventKind]


@dataclass(frozen=True)
class PunchEvent:
    """Domain entity: one timestamped punch.

    ``event_id`` is generated at write time; rows imported from older data
    may not carry one, in which case the event is addressed by index.
    """

    timestamp: datetime
    kind: AnyEventKind
    event_id: Optional[str] = None

    @property
    def is_legacy(self) -> bool:
        return isinstance(self.kind, LegacyEventKind)


@dataclass(frozen=True)
class StoredPunchEvent:
    """Read-model for the admin log editor: the event plus its stored index."""

    index: int
    event: PunchEvent


@dataclass(frozen=True)
class BreakInterval:
    start: datetime
    stop: Optional[datetime] = None
    unmatched: bool = False

    @property
    def is_open(self) -> bool:
        return self.stop is None and not self.unmatched


@dataclass(frozen=True)
class WorkSession:
    """A reconstructed ``[start, stop)`` interval of paid work.

    ``unmatched`` marks a start superseded by a later start before any stop.
    """

    start: datetime
    stop: Optional[datetime] = None
    breaks: tuple[BreakInterval, ...] = ()
    unmatched: bool = False
    start_event_id: Optional[str] = None
    stop_event_id: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.stop is None and not self.unmatched

    @property
    def work_date(self) -> date:
        return self.start.date()

    @property
    def stopped_next_day(self) -> bool:
        return self.stop is not None and self.stop.date() == self.start.date() + timedelta(days=1)


@dataclass(frozen=True)
class ReconstructedLog:
    sessions: tuple[WorkSession, ...] = ()
    pending_work_start: Optional[datetime] = None
    pending_break_start: Optional[datetime] = None
    orphan_stops: int = 0
    loose_breaks: tuple[BreakInterval, ...] = ()


@dataclass(frozen=True)
class LiveState:
    is_working: bool = False
    is_on_break: bool = False
    last_action: Optional[EventKind] = None
    last_action_time: Optional[datetime] = None


@dataclass(frozen=True)
class RangeTotals:
    worked_hours: float = 0.0
    break_hours: float = 0.0
    break_count: int = 0


@dataclass(frozen=True)
class ForgottenStop:
    """A start with no matching stop, from a day other than today."""

    work_date: date
    kind: AnomalyKind
    started_at: datetime


@dataclass(frozen=True)
class DayOverviewRow:
    """Read-model for the admin daily overview."""

    employee_id: int
    name: str
    status: str
    totals: RangeTotals
    state: LiveState
    sessions: tuple[WorkSession, ...] = field(default_factory=tuple)
    has_entries: bool = False
    break_warning: bool = False
