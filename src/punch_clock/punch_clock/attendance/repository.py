from __future__ import annotations

from typing import Protocol, Sequence

from .model import PunchEvent, StoredPunchEvent


class PunchLogRepository(Protocol):
    """Persistence gateway for employee punch logs.

    Indexes are positions in the stored (insertion-ordered) log. Services
    prefer the ``event_id`` variants; index variants exist for the admin
    editor that works on positions.
    """

    def get_full_log(self, employee_id: int) -> Sequence[PunchEvent]:
        raise NotImplementedError

    def get_stored_log(self, employee_id: int) -> Sequence[StoredPunchEvent]:
        raise NotImplementedError

    def append_event(self, employee_id: int, event: PunchEvent) -> PunchEvent:
        """Append one event; returns it with its generated ``event_id``."""

        raise NotImplementedError

    def replace_event_at(self, employee_id: int, index: int, event: PunchEvent) -> bool:
        raise NotImplementedError

    def delete_event_at(self, employee_id: int, index: int) -> bool:
        raise NotImplementedError

    def replace_event(self, employee_id: int, event_id: str, event: PunchEvent) -> bool:
        raise NotImplementedError

    def delete_event(self, employee_id: int, event_id: str) -> bool:
        raise NotImplementedError
