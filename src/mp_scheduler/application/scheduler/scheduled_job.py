"""Application scheduler – ScheduledJob.

Wraps a :class:`Job` in its own frequency controller instead of keeping a
central grid of what is due when.  Each wrapper answers "should I run now?"
from its trigger, its run limit and its execution mode.
"""
from __future__ import annotations

import numbers
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from mp_scheduler.application.scheduler.executor import DetachedExecutor
from mp_scheduler.application.scheduler.job import Job, job_name
from mp_scheduler.application.scheduler.options import JobUpdate
from mp_scheduler.application.scheduler.trigger import (
    TickTrigger,
    TimeTrigger,
    TriggerMode,
    build_trigger,
    check_interval,
)
from mp_scheduler.kernel.errors import BaseError, UnauthorizedError, ValidationError
from mp_scheduler.kernel.security import tokens_equal
from mp_scheduler.kernel.time import Clock, SystemClock
from mp_scheduler.kernel.types import Err, Ok, Result
from mp_scheduler.observability.logging import get_logger

__all__ = ["ScheduledJob"]

logger = get_logger(__name__)


def _check_limit(limit: Any) -> int | None:
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, numbers.Integral) or limit < 0:
        raise ValidationError(
            f"Limit must be a non-negative integer, got {limit!r}",
            errors=[{"field": "limit", "value": repr(limit)}],
        )
    return int(limit)


def _check_job(job: Any) -> Job:
    if not isinstance(job, Job):
        raise ValidationError(
            f"{type(job).__name__} does not implement run()",
            errors=[{"field": "job", "value": type(job).__name__}],
        )
    return job


class ScheduledJob:
    """A job bound to a trigger, a run limit and an execution mode.

    Args:
        job: The work to run.  Not owned; the caller manages its lifetime.
        mode: ``"time"`` (``"t"``) or ``"tick"`` (``"c"``).
        interval: Seconds (time mode) or ticks (tick mode).  0 runs the job on
            every check.
        cursor: Initial offset.  Time mode waits ``cursor * interval`` seconds
            before the first run; tick mode starts counting from ``cursor``
            (default: ``interval``, i.e. run on the first check).
        limit: Maximum number of runs; ``None`` or 0 is unlimited.
        start_time: Absolute time (datetime or timestamp) from which the job
            may run.
        detach: Run the job in a separate worker process.
        secret: Token required by :meth:`update`.
        clock: Time source, :class:`SystemClock` by default.
        executor: Worker spawner used when *detach* is set.

    Raises:
        InvalidTriggerModeError: *mode* is not recognised.
        ValidationError: *interval*, *cursor*, *limit* or *start_time* is
            malformed.
    """

    def __init__(
        self,
        job: Job,
        mode: TriggerMode | str,
        interval: float | int | None = 0,
        cursor: int | None = None,
        limit: int | None = None,
        start_time: datetime | float | None = None,
        detach: bool = False,
        secret: Any = None,
        *,
        clock: Clock | None = None,
        executor: DetachedExecutor | None = None,
    ) -> None:
        self._clock: Clock = clock or SystemClock()
        self._job = _check_job(job)
        self._start_time = start_time
        self._trigger: TimeTrigger | TickTrigger = build_trigger(
            mode,
            interval,
            now=self._clock.timestamp(),
            cursor=cursor,
            start_time=start_time,
        )
        self._limit = _check_limit(limit)
        self._detach = bool(detach)
        self._secret = secret
        self._executor = executor
        self._run_count = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def job(self) -> Job:
        return self._job

    @property
    def mode(self) -> TriggerMode:
        return self._trigger.mode

    @property
    def interval(self) -> float | int:
        return self._trigger.interval

    @property
    def trigger(self) -> TimeTrigger | TickTrigger:
        return self._trigger

    @property
    def limit(self) -> int | None:
        return self._limit

    @property
    def detach(self) -> bool:
        return self._detach

    @property
    def run_count(self) -> int:
        """Runs counted while a limit is set."""
        return self._run_count

    @property
    def is_exhausted(self) -> bool:
        return bool(self._limit) and self._run_count >= self._limit  # type: ignore[operator]

    @property
    def name(self) -> str:
        return job_name(self._job)

    # ------------------------------------------------------------------
    # Authentication / reconfiguration
    # ------------------------------------------------------------------

    def authenticate(self, secret: Any) -> bool:
        return tokens_equal(secret, self._secret)

    def apply(
        self,
        options: JobUpdate | Mapping[str, Any],
        secret: Any = None,
    ) -> Result["ScheduledJob", BaseError]:
        """Overwrite the recognised fields in *options* after checking *secret*.

        Recognised fields are ``job``, ``mode``, ``interval``, ``limit``,
        ``detach`` and ``secret``; anything else is ignored.  Every value is
        validated before the first field is written, so a rejected update
        leaves the job untouched.  A new ``mode`` replaces the trigger with a
        fresh one that is due on its next check; a new ``interval`` alone
        keeps the trigger's current position.
        """
        if not self.authenticate(secret):
            logger.warning("scheduled_job.update_refused", job=self.name)
            return Err(UnauthorizedError("Invalid job secret"))

        changes = JobUpdate.coerce(options)
        try:
            job = _check_job(changes["job"]) if "job" in changes else self._job
            mode = TriggerMode.parse(changes["mode"]) if "mode" in changes else self.mode
            interval = (
                check_interval(changes["interval"]) if "interval" in changes else self.interval
            )
            limit = _check_limit(changes["limit"]) if "limit" in changes else self._limit
        except ValidationError as exc:
            logger.warning("scheduled_job.update_invalid", job=self.name, error=exc.to_dict())
            return Err(exc)

        if mode is not self.mode:
            self._trigger = build_trigger(
                mode,
                interval,
                now=self._clock.timestamp(),
                start_time=self._start_time,
            )
        elif "interval" in changes:
            self._trigger.retune(interval)

        self._job = job
        self._limit = limit
        if "detach" in changes:
            self._detach = bool(changes["detach"])
        if "secret" in changes:
            self._secret = changes["secret"]

        logger.info("scheduled_job.updated", job=self.name, fields=sorted(changes))
        return Ok(self)

    def update(self, options: JobUpdate | Mapping[str, Any], secret: Any = None) -> bool:
        """Boolean form of :meth:`apply`."""
        return self.apply(options, secret).is_ok()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _detached_executor(self) -> DetachedExecutor:
        if self._executor is None:
            self._executor = DetachedExecutor()
        return self._executor

    def run(self) -> bool:
        """Run the job if it is due.

        Returns ``True`` when the job was started this cycle.  That says
        nothing about how the job itself went: inline errors propagate to
        the caller and detached errors are never seen.
        """
        if self.is_exhausted:
            return False

        if not self._trigger.evaluate(self._clock.timestamp()):
            return False

        if self._detach:
            outcome = self._detached_executor().spawn(self._job)
            if outcome.is_err():
                logger.warning(
                    "scheduled_job.spawn_failed",
                    job=self.name,
                    error=outcome.error.to_dict(),
                )
                return False
            logger.debug("scheduled_job.spawned", job=self.name, pid=outcome.value)
        else:
            self._job.run()

        if self._limit:
            self._run_count += 1

        logger.debug("scheduled_job.fired", job=self.name, run_count=self._run_count)
        return True

    def __repr__(self) -> str:
        return (
            f"ScheduledJob(job={self.name!r}, trigger={self._trigger!r}, "
            f"limit={self._limit!r}, detach={self._detach!r})"
        )
