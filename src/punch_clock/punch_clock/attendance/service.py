from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import as_range_end, as_range_start, hours_between
from ..core.constants import BREAK_WARNING_HOURS
from ..core.enums import AnomalyKind, DailyStatus, EventKind, PunchAction, parse_event_kind
from ..core.exceptions import ForgottenStopError, NotFoundError, ValidationError
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from ..users.model import Employee
from ..users.repository import EmployeeRepository
from ..users.service import EmployeeService
from .factory import PunchStrategyFactory
from .legacy import upgrade_legacy_log
from .model import (
    DayOverviewRow,
    ForgottenStop,
    LiveState,
    PunchEvent,
    RangeTotals,
    StoredPunchEvent,
    WorkSession,
)
from .reducer import (
    aggregate_day,
    aggregate_range,
    derive_live_state,
    detect_forgotten_stops,
    reconstruct_sessions,
    sessions_for_day,
    sessions_in_range,
)
from .repository import PunchLogRepository
from .strategies.base import ACTION_LABELS

logger = logging.getLogger(__name__)

LEGACY_LABELS = {"IN": "Punched In", "OUT": "Punched Out"}


def label_for(event: PunchEvent) -> str:
    if event.is_legacy:
        return LEGACY_LABELS[event.kind.value]
    return ACTION_LABELS[event.kind]


@dataclass(frozen=True)
class PunchResult:
    employee: Employee
    event: Optional[PunchEvent]
    message: str
    is_admin: bool = False


@dataclass(frozen=True)
class WorkingNow:
    employee: Employee
    state: LiveState
    elapsed_hours: float = 0.0


@dataclass(frozen=True)
class EmployeeDetail:
    """Read-model for the admin attendance detail page."""

    employee: Employee
    entries: list[StoredPunchEvent]
    counts: dict[str, int]
    totals: RangeTotals
    earnings: float
    sessions: tuple[WorkSession, ...] = field(default_factory=tuple)


class AttendanceService:
    def __init__(
        self,
        punch_logs: PunchLogRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: PunchStrategyFactory | None = None,
        calculator: PayrollCalculator | None = None,
        break_warning_hours: float = BREAK_WARNING_HOURS,
    ):
        self._logs = punch_logs
        self._employees = employees
        self._directory = EmployeeService(employees)
        self._factory = strategy_factory or PunchStrategyFactory()
        self._calculator = calculator or StandardPayrollCalculator()
        self._break_warning_hours = float(break_warning_hours)

    # ----- punch clock -----

    def _append(self, employee: Employee, kind: EventKind, at: datetime) -> PunchEvent:
        saved = self._logs.append_event(employee.employee_id, PunchEvent(timestamp=at, kind=kind))
        logger.info("Employee %s: %s at %s", employee.employee_id, kind.value, at.isoformat())
        return saved

    @staticmethod
    def _message(employee: Employee, kind: EventKind, at: datetime) -> str:
        return f"{employee.name} - {ACTION_LABELS[kind]} at {at.strftime('%H:%M:%S')}"

    @staticmethod
    def _forgotten_work(events: Sequence[PunchEvent], today: date) -> Optional[ForgottenStop]:
        start = reconstruct_sessions(events).pending_work_start
        if start is None or start.date() >= today:
            return None
        if any(e.is_legacy and e.timestamp == start for e in events):
            # Left to the admin anomaly list; the punch pad never asks about legacy days.
            return None
        return ForgottenStop(work_date=start.date(), kind=AnomalyKind.WORK, started_at=start)

    def punch(self, secret_code: str, action: PunchAction | str = PunchAction.PUNCH, *, now: datetime) -> PunchResult:
        employee = self._directory.find_by_secret_code(secret_code)
        if employee.is_admin:
            return PunchResult(employee=employee, event=None, message=f"Welcome, {employee.name}", is_admin=True)

        strategy = self._factory.for_action(action)
        events = self._logs.get_full_log(employee.employee_id)

        if PunchAction(action) in (PunchAction.PUNCH, PunchAction.START_WORK):
            forgotten = self._forgotten_work(events, now.date())
            if forgotten is not None:
                raise ForgottenStopError(
                    f"You did not stop work on {forgotten.work_date.isoformat()}. "
                    "Please enter the time you stopped.",
                    forgotten,
                )

        decision = strategy.decide(derive_live_state(events, now.date()))
        saved = self._append(employee, decision.kind, now)
        return PunchResult(employee=employee, event=saved, message=self._message(employee, decision.kind, now))

    def resolve_forgotten_stop(self, secret_code: str, stop_time: datetime | time, *, now: datetime) -> PunchResult:
        """Record the missing stop of a previous day's session, then start work now.

        A bare ``time`` is taken on the day the open session started.
        """
        employee = self._directory.find_by_secret_code(secret_code)
        if employee.is_admin:
            raise ValidationError("The admin code cannot punch")

        events = self._logs.get_full_log(employee.employee_id)
        forgotten = self._forgotten_work(events, now.date())
        if forgotten is None:
            raise ValidationError("There is no forgotten stop to resolve")

        if isinstance(stop_time, time):
            stop_time = datetime.combine(forgotten.work_date, stop_time)
        if stop_time <= forgotten.started_at:
            raise ValidationError("Stop time must be after the start of work")
        if stop_time > now:
            raise ValidationError("Stop time cannot be in the future")

        pending_break = reconstruct_sessions(events).pending_break_start
        closes_break = pending_break is not None and pending_break >= forgotten.started_at
        if closes_break and stop_time <= pending_break:
            raise ValidationError(
                f"Stop time must be after the break started at {pending_break.strftime('%H:%M')}"
            )

        if closes_break:
            self._append(employee, EventKind.STOP_BREAK, stop_time)
        self._append(employee, EventKind.STOP_WORK, stop_time)
        saved = self._append(employee, EventKind.START_WORK, now)
        logger.info("Employee %s: resolved forgotten stop of %s", employee.employee_id, forgotten.work_date)
        return PunchResult(employee=employee, event=saved, message=self._message(employee, EventKind.START_WORK, now))

    def live_state(self, secret_code: str, *, today: date | None = None) -> tuple[Employee, LiveState]:
        employee = self._directory.find_by_secret_code(secret_code)
        return employee, derive_live_state(self._logs.get_full_log(employee.employee_id), today)

    # ----- admin views -----

    def _status_key(self, day: date, today: date, events: Sequence[PunchEvent], state: LiveState) -> DailyStatus:
        sessions = [s for s in sessions_for_day(events, day) if not s.unmatched]
        next_day = day + timedelta(days=1)
        if any(s.stop is not None and s.stop.date() in (day, next_day) for s in sessions):
            return DailyStatus.COMPLETED
        if day == today:
            if state.is_on_break:
                return DailyStatus.ON_BREAK
            return DailyStatus.WORKING if state.is_working else DailyStatus.NOT_WORKING

        day_kinds = {e.kind for e in upgrade_legacy_log(events) if e.timestamp.date() == day}
        if EventKind.START_BREAK in day_kinds and EventKind.STOP_BREAK not in day_kinds:
            return DailyStatus.ON_BREAK
        if sessions:
            return DailyStatus.WORKING
        return DailyStatus.NOT_WORKING

    def daily_overview(self, day: date, *, now: datetime) -> list[DayOverviewRow]:
        rows: list[DayOverviewRow] = []
        for emp in self._employees.list_employees():
            events = self._logs.get_full_log(emp.employee_id)
            totals = aggregate_day(events, day, now=now)
            state = derive_live_state(events, now.date())
            rows.append(
                DayOverviewRow(
                    employee_id=emp.employee_id,
                    name=emp.name,
                    status=self._status_key(day, now.date(), events, state).value,
                    totals=totals,
                    state=state,
                    sessions=sessions_for_day(events, day),
                    has_entries=any(e.timestamp.date() == day for e in events),
                    break_warning=totals.break_hours > self._break_warning_hours,
                )
            )
        return rows

    def currently_working(self, *, now: datetime) -> list[WorkingNow]:
        out: list[WorkingNow] = []
        for emp in self._employees.list_employees():
            state = derive_live_state(self._logs.get_full_log(emp.employee_id), now.date())
            if state.is_working or state.is_on_break:
                since = state.last_action_time or now
                out.append(WorkingNow(employee=emp, state=state, elapsed_hours=hours_between(since, now)))
        out.sort(key=lambda w: w.state.last_action_time or datetime.min, reverse=True)
        return out

    def forgotten_stops(self, today: date) -> list[tuple[Employee, list[ForgottenStop]]]:
        out: list[tuple[Employee, list[ForgottenStop]]] = []
        for emp in self._employees.list_employees():
            found = detect_forgotten_stops(self._logs.get_full_log(emp.employee_id), today)
            if found:
                out.append((emp, found))
        return out

    # ----- log editor -----

    def _require_employee(self, employee_id: int) -> Employee:
        emp = self._employees.get_by_id(int(employee_id))
        if not emp or emp.is_admin:
            raise NotFoundError("Employee not found")
        return emp

    @staticmethod
    def _edited_event(timestamp: datetime, kind) -> PunchEvent:
        if not isinstance(timestamp, datetime):
            raise ValidationError("Timestamp is required")
        try:
            parsed = parse_event_kind(kind.value if hasattr(kind, "value") else str(kind))
        except ValueError as e:
            raise ValidationError(str(e))
        return PunchEvent(timestamp=timestamp, kind=parsed)

    def list_log(
        self,
        employee_id: int,
        *,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
    ) -> list[StoredPunchEvent]:
        self._require_employee(employee_id)
        stored = list(self._logs.get_stored_log(int(employee_id)))
        if start is not None:
            lo = as_range_start(start)
            stored = [s for s in stored if s.event.timestamp >= lo]
        if end is not None:
            hi = as_range_end(end)
            stored = [s for s in stored if s.event.timestamp <= hi]
        stored.sort(key=lambda s: (s.event.timestamp, s.index))
        return stored

    def locate_event(self, employee_id: int, *, timestamp: datetime, kind) -> StoredPunchEvent:
        """Find a stored event by exact timestamp and kind (rows without an id)."""
        wanted = self._edited_event(timestamp, kind)
        for s in self.list_log(employee_id):
            if s.event.timestamp == wanted.timestamp and s.event.kind == wanted.kind:
                return s
        raise NotFoundError("Log entry not found")

    def replace_event_at(self, employee_id: int, index: int, *, timestamp: datetime, kind) -> None:
        self._require_employee(employee_id)
        if not self._logs.replace_event_at(int(employee_id), int(index), self._edited_event(timestamp, kind)):
            raise NotFoundError("Log entry not found")
        logger.info("Employee %s: replaced log entry #%s", employee_id, index)

    def delete_event_at(self, employee_id: int, index: int) -> None:
        self._require_employee(employee_id)
        if not self._logs.delete_event_at(int(employee_id), int(index)):
            raise NotFoundError("Log entry not found")
        logger.info("Employee %s: deleted log entry #%s", employee_id, index)

    def replace_event(self, employee_id: int, event_id: str, *, timestamp: datetime, kind) -> None:
        self._require_employee(employee_id)
        if not self._logs.replace_event(int(employee_id), event_id, self._edited_event(timestamp, kind)):
            raise NotFoundError("Log entry not found")
        logger.info("Employee %s: replaced log entry %s", employee_id, event_id)

    def delete_event(self, employee_id: int, event_id: str) -> None:
        self._require_employee(employee_id)
        if not self._logs.delete_event(int(employee_id), event_id):
            raise NotFoundError("Log entry not found")
        logger.info("Employee %s: deleted log entry %s", employee_id, event_id)

    def employee_detail(self, employee_id: int, start: date, end: date, *, now: datetime) -> EmployeeDetail:
        emp = self._require_employee(employee_id)
        if start > end:
            raise ValidationError("Start date cannot be after end date")

        events = self._logs.get_full_log(emp.employee_id)
        entries = self.list_log(emp.employee_id, start=start, end=end)
        counts = Counter(label_for(s.event) for s in entries)
        totals = aggregate_range(events, start, end, now=now)
        return EmployeeDetail(
            employee=emp,
            entries=entries,
            counts=dict(counts),
            totals=totals,
            earnings=self._calculator.earnings(totals, emp.hourly_rate),
            sessions=sessions_in_range(events, start, end),
        )
