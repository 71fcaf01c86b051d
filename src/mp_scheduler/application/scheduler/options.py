"""Application scheduler – registration and update options."""
from __future__ import annotations

import dataclasses
from collections.abc import Hashable, Mapping
from datetime import datetime
from typing import Any

__all__ = ["JobUpdate", "ScheduleOptions", "UPDATABLE_FIELDS"]

# Fields a job's owner may overwrite through ``ScheduledJob.update``.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"job", "mode", "interval", "limit", "detach", "secret"}
)

_OPTION_ALIASES = {"startTime": "start_time", "start_at": "start_time"}


@dataclasses.dataclass(frozen=True)
class ScheduleOptions:
    """Options accepted by :meth:`Scheduler.register`.

    ``key`` authenticates the request against the scheduler.  ``interval``
    is seconds in time mode and ticks in tick mode.  ``cursor`` delays the
    first run: by ``cursor * interval`` seconds in time mode, or by
    ``interval - cursor`` ticks in tick mode.  ``limit`` caps the number of
    runs (``None``/0 is unlimited).  ``secret`` is required later to update
    the job, which also needs an ``id`` to find it.  ``fatal`` decides
    whether errors from this job may abort the caller.
    """

    key: Any = ""
    interval: float | int | None = None
    cursor: int | None = None
    limit: int | None = None
    start_time: datetime | float | None = None
    secret: Any = None
    id: Hashable | None = None  # noqa: A003
    detach: bool = False
    fatal: bool = True

    @classmethod
    def merge(cls, options: "ScheduleOptions | Mapping[str, Any] | None") -> "ScheduleOptions":
        """Overlay *options* on the defaults; unknown keys are ignored."""
        if options is None:
            return cls()
        if isinstance(options, ScheduleOptions):
            return options
        known = {field.name for field in dataclasses.fields(cls)}
        values: dict[str, Any] = {}
        for name, value in options.items():
            name = _OPTION_ALIASES.get(name, name)
            if name in known:
                values[name] = value
        return cls(**values)

    @property
    def has_id(self) -> bool:
        return self.id is not None and self.id != ""


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclasses.dataclass(frozen=True)
class JobUpdate:
    """Typed form of the option mapping accepted by ``ScheduledJob.update``.

    Only fields that are explicitly set are applied.
    """

    job: Any = UNSET
    mode: Any = UNSET
    interval: Any = UNSET
    limit: Any = UNSET
    detach: Any = UNSET
    secret: Any = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            field.name: getattr(self, field.name)
            for field in dataclasses.fields(self)
            if getattr(self, field.name) is not UNSET
        }

    @classmethod
    def coerce(cls, options: "JobUpdate | Mapping[str, Any]") -> dict[str, Any]:
        """Return the recognised changes in *options*."""
        if isinstance(options, JobUpdate):
            return options.changes()
        return {name: value for name, value in options.items() if name in UPDATABLE_FIELDS}
