from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import PunchAction
from ..core.exceptions import ValidationError
from .strategies.base import PunchStrategy
from .strategies.break_strategy import StartBreakStrategy, StopBreakStrategy
from .strategies.work_strategy import StartWorkStrategy, StopWorkStrategy, ToggleWorkStrategy


@dataclass
class PunchStrategyFactory:
    """Factory Pattern: choose the strategy for a punch-clock action."""

    def for_action(self, action: PunchAction | str) -> PunchStrategy:
        try:
            action = PunchAction(action)
        except ValueError:
            raise ValidationError(f"Unknown punch action: {action}")

        if action == PunchAction.PUNCH:
            return ToggleWorkStrategy()
        if action == PunchAction.START_WORK:
            return StartWorkStrategy()
        if action == PunchAction.STOP_WORK:
            return StopWorkStrategy()
        if action == PunchAction.START_BREAK:
            return StartBreakStrategy()
        return StopBreakStrategy()
