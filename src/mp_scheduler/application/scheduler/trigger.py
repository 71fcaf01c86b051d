"""Application scheduler – trigger policies.

A trigger decides, each time it is evaluated, whether its job is due.

* :class:`TimeTrigger` fires once ``now`` reaches ``next_fire_at`` and then
  schedules the next deadline ``interval`` seconds after the firing instant.
  Late sweeps therefore drift forward instead of bursting to catch up.
* :class:`TickTrigger` counts evaluations.  Every call made after
  ``start_at`` is one tick; the trigger fires when the cursor reaches
  ``interval`` and then starts counting from zero again.  Lower intervals
  mean the job runs on more sweeps, so tick mode doubles as a priority knob.
"""
from __future__ import annotations

import numbers
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from mp_scheduler.kernel.errors import InvalidTriggerModeError, ValidationError
from mp_scheduler.kernel.time import to_timestamp

__all__ = [
    "TickTrigger",
    "TimeTrigger",
    "TriggerMode",
    "TriggerPolicy",
    "build_trigger",
    "check_interval",
]

# Single-letter codes: 't' for time, 'c' for count.
_MODE_ALIASES = {"t": "time", "c": "tick", "count": "tick", "counter": "tick"}


class TriggerMode(StrEnum):
    TIME = "time"
    TICK = "tick"

    @classmethod
    def parse(cls, mode: Any) -> "TriggerMode":
        """Resolve *mode* case-insensitively, accepting the short aliases.

        Raises :class:`InvalidTriggerModeError` for anything else.
        """
        if isinstance(mode, TriggerMode):
            return mode
        if isinstance(mode, str):
            normalised = mode.strip().lower()
            normalised = _MODE_ALIASES.get(normalised, normalised)
            for member in cls:
                if member.value == normalised:
                    return member
        raise InvalidTriggerModeError(mode)


def check_interval(interval: Any) -> float | int:
    """Validate a trigger interval; ``None`` means 0 (due on every check)."""
    if interval is None:
        return 0
    if isinstance(interval, bool) or not isinstance(interval, numbers.Real):
        raise ValidationError(
            f"Interval must be a number, got {interval!r}",
            errors=[{"field": "interval", "value": repr(interval)}],
        )
    if interval < 0:
        raise ValidationError(
            f"Interval must be >= 0, got {interval!r}",
            errors=[{"field": "interval", "value": repr(interval)}],
        )
    return interval


def _check_start_time(start_time: Any) -> float | None:
    if start_time is None:
        return None
    if not isinstance(start_time, datetime) and (
        isinstance(start_time, bool) or not isinstance(start_time, numbers.Real)
    ):
        raise ValidationError(
            f"Start time must be a datetime or a timestamp, got {start_time!r}",
            errors=[{"field": "start_time", "value": repr(start_time)}],
        )
    return to_timestamp(start_time)


def _check_cursor(cursor: Any) -> int | None:
    if cursor is None:
        return None
    if isinstance(cursor, bool) or not isinstance(cursor, numbers.Integral):
        raise ValidationError(
            f"Cursor must be an integer, got {cursor!r}",
            errors=[{"field": "cursor", "value": repr(cursor)}],
        )
    return int(cursor)


@runtime_checkable
class TriggerPolicy(Protocol):
    """Port: decides whether a job is due at ``now`` (POSIX timestamp)."""

    @property
    def mode(self) -> TriggerMode: ...

    @property
    def interval(self) -> float | int: ...

    def evaluate(self, now: float) -> bool: ...

    def retune(self, interval: float | int) -> None: ...


class TimeTrigger:
    """Fires every ``interval`` seconds, measured from the last firing."""

    def __init__(self, interval: float | int, next_fire_at: float) -> None:
        self._interval = check_interval(interval)
        self._next_fire_at = float(next_fire_at)

    @classmethod
    def starting(
        cls,
        interval: float | int,
        *,
        now: float,
        cursor: int | None = None,
        start_time: datetime | float | None = None,
    ) -> "TimeTrigger":
        """Build a trigger whose first deadline is ``cursor`` intervals after
        ``start_time`` (or after *now* when no start time is given).
        """
        interval = check_interval(interval)
        start_at = _check_start_time(start_time)
        base = now if start_at is None else start_at
        offset = (_check_cursor(cursor) or 0) * interval
        return cls(interval, base + offset)

    @property
    def mode(self) -> TriggerMode:
        return TriggerMode.TIME

    @property
    def interval(self) -> float | int:
        return self._interval

    @property
    def next_fire_at(self) -> float:
        return self._next_fire_at

    def evaluate(self, now: float) -> bool:
        if now < self._next_fire_at:
            return False
        self._next_fire_at = now + self._interval
        return True

    def retune(self, interval: float | int) -> None:
        """Change the interval; the pending deadline is kept."""
        self._interval = check_interval(interval)

    def __repr__(self) -> str:
        return f"TimeTrigger(interval={self._interval!r}, next_fire_at={self._next_fire_at!r})"


class TickTrigger:
    """Fires on every ``interval``-th evaluation once ``start_at`` has passed."""

    def __init__(
        self,
        interval: float | int,
        cursor: int | None = None,
        start_at: datetime | float | None = None,
    ) -> None:
        self._interval = check_interval(interval)
        checked = _check_cursor(cursor)
        # Defaulting to the interval makes the first eligible tick fire.
        self._cursor: int | float = self._interval if checked is None else checked
        self._start_at = _check_start_time(start_at)

    @property
    def mode(self) -> TriggerMode:
        return TriggerMode.TICK

    @property
    def interval(self) -> float | int:
        return self._interval

    @property
    def cursor(self) -> int | float:
        return self._cursor

    @property
    def start_at(self) -> float | None:
        return self._start_at

    def evaluate(self, now: float) -> bool:
        if self._start_at is not None and now < self._start_at:
            return False
        self._cursor += 1
        if self._cursor < self._interval:
            return False
        self._cursor = 0
        return True

    def retune(self, interval: float | int) -> None:
        """Change the interval; the cursor keeps its position."""
        self._interval = check_interval(interval)

    def __repr__(self) -> str:
        return (
            f"TickTrigger(interval={self._interval!r}, cursor={self._cursor!r}, "
            f"start_at={self._start_at!r})"
        )


def build_trigger(
    mode: Any,
    interval: float | int | None,
    *,
    now: float,
    cursor: int | None = None,
    start_time: datetime | float | None = None,
) -> TimeTrigger | TickTrigger:
    """Construct the trigger variant for *mode*.

    Raises
    ------
    InvalidTriggerModeError
        When *mode* is not a recognised trigger mode.
    ValidationError
        When *interval*, *cursor* or *start_time* is malformed.
    """
    resolved = TriggerMode.parse(mode)
    if resolved is TriggerMode.TIME:
        return TimeTrigger.starting(interval, now=now, cursor=cursor, start_time=start_time)
    return TickTrigger(check_interval(interval), cursor=cursor, start_at=start_time)
