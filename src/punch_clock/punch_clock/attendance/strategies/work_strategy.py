from __future__ import annotations

from ...core.enums import EventKind
from ...core.exceptions import ValidationError
from ..model import LiveState
from .base import PunchDecision, PunchStrategy


class StartWorkStrategy(PunchStrategy):
    def decide(self, state: LiveState) -> PunchDecision:
        if state.is_on_break:
            raise ValidationError("You are currently on a break. Please end your break before punching in/out.")
        if state.is_working:
            raise ValidationError("You have already started work. Please stop work first.")
        return PunchDecision(kind=EventKind.START_WORK)


class StopWorkStrategy(PunchStrategy):
    def decide(self, state: LiveState) -> PunchDecision:
        if state.is_on_break:
            raise ValidationError("You are currently on a break. Please end your break before punching in/out.")
        if not state.is_working:
            raise ValidationError("You have not started work. Please start work first.")
        return PunchDecision(kind=EventKind.STOP_WORK)


class ToggleWorkStrategy(PunchStrategy):
    """Single punch button: stop work when working, otherwise start it."""

    def decide(self, state: LiveState) -> PunchDecision:
        if state.is_working:
            return StopWorkStrategy().decide(state)
        return StartWorkStrategy().decide(state)
