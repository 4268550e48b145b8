from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import EventKind
from ..model import LiveState

ACTION_LABELS = {
    EventKind.START_WORK: "Started Work",
    EventKind.STOP_WORK: "Stopped Work",
    EventKind.START_BREAK: "Started Break",
    EventKind.STOP_BREAK: "Stopped Break",
}


@dataclass(frozen=True)
class PunchDecision:
    kind: EventKind

    @property
    def label(self) -> str:
        return ACTION_LABELS[self.kind]


class PunchStrategy(ABC):
    """Strategy Pattern: decide which event a punch-clock action appends."""

    @abstractmethod
    def decide(self, state: LiveState) -> PunchDecision:
        """Return the event to append, or raise ValidationError if the action is not allowed now."""
        raise NotImplementedError
