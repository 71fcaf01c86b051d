"""Application scheduler – ports for the request channel and schedule store.

The scheduler accepts these handles and keeps them; it does not read from
the channel or load/save through the store.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mp_scheduler.application.scheduler.scheduler import ScheduleEntry

__all__ = ["ScheduleChannel", "ScheduleStore"]


@runtime_checkable
class ScheduleChannel(Protocol):
    """Port: inbound job submission / update requests (e.g. a named pipe)."""

    def receive(self) -> Mapping[str, Any] | None: ...


@runtime_checkable
class ScheduleStore(Protocol):
    """Port: durable copy of the schedule across restarts."""

    def load(self) -> Iterable[Mapping[str, Any]]: ...
    def save(self, entries: Sequence["ScheduleEntry"]) -> None: ...
