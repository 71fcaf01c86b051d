"""Application scheduler – Scheduler registry and dispatch sweep."""
from __future__ import annotations

import threading
from collections.abc import Collection, Hashable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mp_scheduler.application.scheduler.executor import DetachedExecutor
from mp_scheduler.application.scheduler.job import Job, job_name
from mp_scheduler.application.scheduler.options import JobUpdate, ScheduleOptions
from mp_scheduler.application.scheduler.ports import ScheduleChannel, ScheduleStore
from mp_scheduler.application.scheduler.scheduled_job import ScheduledJob
from mp_scheduler.application.scheduler.trigger import TriggerMode
from mp_scheduler.kernel.errors import (
    BaseError,
    DuplicateJobIdError,
    UnauthorizedError,
    ValidationError,
)
from mp_scheduler.kernel.security import is_key_set, key_matches
from mp_scheduler.kernel.time import Clock, SystemClock
from mp_scheduler.kernel.types import Err, Ok, Result
from mp_scheduler.observability.logging import get_logger

if TYPE_CHECKING:
    from mp_scheduler.application.scheduler.settings import SchedulerSettings

__all__ = ["JobFailure", "ScheduleEntry", "Scheduler", "SweepReport"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduleEntry:
    """A registered job.  ``id`` is ``None`` for positional entries."""

    job: ScheduledJob
    fatal: bool = True
    id: Hashable | None = None  # noqa: A003


@dataclass(frozen=True)
class JobFailure:
    """An error raised by a non-fatal entry during a sweep."""

    entry: Hashable
    error: Exception


@dataclass(frozen=True)
class SweepReport:
    """Outcome of one pass over the schedule.

    ``fired`` holds the id (or position, for unkeyed entries) of every job
    started during the pass.
    """

    fired: tuple[Hashable, ...] = ()
    failures: tuple[JobFailure, ...] = field(default_factory=tuple)

    @property
    def any_fired(self) -> bool:
        return bool(self.fired)


class Scheduler:
    """Registry of scheduled jobs gated by a key.

    Parameters
    ----------
    pipe:
        Channel for job requests (a named pipe path or a
        :class:`ScheduleChannel`).  Stored, not read.
    key:
        The key registration requests must present, or a collection of
        accepted keys (useful when several developers share a system).
    schedule_file:
        Where the schedule would be loaded from and saved to (a path or a
        :class:`ScheduleStore`).  Stored, not used.
    allow_fatal:
        Let construction errors of entries registered with ``fatal=True``
        propagate out of :meth:`register`.  Off by default.
    clock:
        Time source shared by every registered job.
    executor:
        Worker spawner shared by detached jobs.

    The schedule is an ordered list plus an id index; sweeps visit entries
    in registration order whether or not they carry an id.
    """

    def __init__(
        self,
        pipe: ScheduleChannel | str | None = None,
        key: Any | Collection[Any] = "",
        schedule_file: ScheduleStore | str | None = None,
        allow_fatal: bool = False,
        *,
        clock: Clock | None = None,
        executor: DetachedExecutor | None = None,
    ) -> None:
        self._pipe = pipe
        self._key = frozenset(key) if isinstance(key, (set, list)) else key
        self._schedule_file = schedule_file
        self._allow_fatal = bool(allow_fatal)
        self._clock: Clock = clock or SystemClock()
        self._executor = executor
        self._entries: list[ScheduleEntry] = []
        self._index: dict[Hashable, int] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        settings: "SchedulerSettings",
        *,
        clock: Clock | None = None,
    ) -> "Scheduler":
        return cls(
            pipe=settings.pipe or None,
            key=settings.key,
            schedule_file=settings.schedule_file or None,
            allow_fatal=settings.allow_fatal,
            clock=clock,
            executor=DetachedExecutor(settings.start_method or None),
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def pipe(self) -> ScheduleChannel | str | None:
        return self._pipe

    @property
    def schedule_file(self) -> ScheduleStore | str | None:
        return self._schedule_file

    @property
    def allow_fatal(self) -> bool:
        return self._allow_fatal

    @property
    def entries(self) -> tuple[ScheduleEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def get(self, job_id: Hashable) -> ScheduledJob | None:
        with self._lock:
            position = self._index.get(job_id)
            return None if position is None else self._entries[position].job

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._index

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def authenticate(self, key: Any) -> bool:
        """True when *key* is the configured key or one of the configured keys."""
        return key_matches(key, self._key)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        job: Job,
        mode: TriggerMode | str,
        options: ScheduleOptions | Mapping[str, Any] | None = None,
    ) -> Result[ScheduleEntry, BaseError]:
        """Build a :class:`ScheduledJob` for *job* and add it to the schedule.

        Returns ``Err(UnauthorizedError)`` for a bad key,
        ``Err(DuplicateJobIdError)`` when ``options.id`` is taken, and
        ``Err(ValidationError)`` when the job cannot be built.  In every
        error case the schedule is left unchanged.

        Raises
        ------
        ValidationError
            Only when the job cannot be built, ``options.fatal`` is set and
            the scheduler was created with ``allow_fatal=True``.
        """
        opts = ScheduleOptions.merge(options)
        name = job_name(job)

        with self._lock:
            if not self.authenticate(opts.key):
                logger.warning("scheduler.auth_failed", job=name, key_set=is_key_set(self._key))
                return Err(UnauthorizedError("Invalid scheduler key"))

            try:
                scheduled = ScheduledJob(
                    job,
                    mode,
                    opts.interval,
                    opts.cursor,
                    opts.limit,
                    opts.start_time,
                    opts.detach,
                    opts.secret,
                    clock=self._clock,
                    executor=self._executor,
                )
            except ValidationError as exc:
                if opts.fatal and self._allow_fatal:
                    raise
                logger.warning("scheduler.construction_failed", job=name, error=exc.to_dict())
                return Err(exc)

            if opts.has_id:
                if opts.id in self._index:
                    logger.info("scheduler.duplicate_id", job=name, job_id=opts.id)
                    return Err(DuplicateJobIdError(str(opts.id)))
                entry = ScheduleEntry(job=scheduled, fatal=opts.fatal, id=opts.id)
                self._index[opts.id] = len(self._entries)
            else:
                entry = ScheduleEntry(job=scheduled, fatal=opts.fatal)
            self._entries.append(entry)

        logger.info(
            "scheduler.job_registered",
            job=name,
            job_id=entry.id,
            mode=str(scheduled.mode),
            interval=scheduled.interval,
            detach=scheduled.detach,
        )
        return Ok(entry)

    def schedule_job(
        self,
        job: Job,
        mode: TriggerMode | str,
        options: ScheduleOptions | Mapping[str, Any] | None = None,
    ) -> bool:
        """Boolean form of :meth:`register`."""
        return self.register(job, mode, options).is_ok()

    def update_job(
        self,
        job_id: Hashable,
        options: JobUpdate | Mapping[str, Any],
        secret: Any = None,
    ) -> bool:
        """Reconfigure the job registered under *job_id*; see :meth:`ScheduledJob.update`."""
        with self._lock:
            scheduled = self.get(job_id)
            if scheduled is None:
                logger.info("scheduler.update_unknown_id", job_id=job_id)
                return False
            return scheduled.update(options, secret)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def sweep(self) -> SweepReport:
        """Give every entry, in order, a chance to run.

        Errors raised by an inline job propagate when its entry is fatal
        (the default) and abort the rest of the pass.  Errors from non-fatal
        entries are logged and the entry counts as not fired.
        """
        fired: list[Hashable] = []
        failures: list[JobFailure] = []

        with self._lock:
            for position, entry in enumerate(tuple(self._entries)):
                label = position if entry.id is None else entry.id
                try:
                    ran = entry.job.run()
                except Exception as exc:
                    if entry.fatal:
                        raise
                    logger.error(
                        "scheduler.job_failed",
                        job=entry.job.name,
                        entry=label,
                        exc_info=exc,
                    )
                    failures.append(JobFailure(entry=label, error=exc))
                    continue
                if ran:
                    fired.append(label)

        return SweepReport(fired=tuple(fired), failures=tuple(failures))

    def run(self) -> bool:
        """Run one sweep; ``True`` if any job fired."""
        return self.sweep().any_fired
