from __future__ import annotations

from ...core.enums import EventKind
from ...core.exceptions import ValidationError
from ..model import LiveState
from .base import PunchDecision, PunchStrategy


class StartBreakStrategy(PunchStrategy):
    def decide(self, state: LiveState) -> PunchDecision:
        if not state.is_working:
            raise ValidationError("You must be punched in to start a break.")
        return PunchDecision(kind=EventKind.START_BREAK)


class StopBreakStrategy(PunchStrategy):
    def decide(self, state: LiveState) -> PunchDecision:
        if not state.is_on_break:
            raise ValidationError("You must be on a break to end break. Start a break first.")
        return PunchDecision(kind=EventKind.STOP_BREAK)
