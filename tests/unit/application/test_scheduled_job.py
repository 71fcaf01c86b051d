"""Unit tests for ScheduledJob."""
from __future__ import annotations

from datetime import timedelta

import pytest
import structlog

from mp_scheduler.application.scheduler import (
    DetachedExecutor,
    FunctionJob,
    JobUpdate,
    ScheduledJob,
    TickTrigger,
    TimeTrigger,
    TriggerMode,
)
from mp_scheduler.kernel.errors import (
    InvalidTriggerModeError,
    UnauthorizedError,
    ValidationError,
)
from mp_scheduler.testing import FailingJob, FakeProcessContext, RecordingJob


def _make(job, clock, mode="time", **kwargs) -> ScheduledJob:
    return ScheduledJob(job, mode, clock=clock, **kwargs)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------
class TestConstruction:
    def test_defaults(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5)
        assert sj.job is recording_job
        assert sj.mode is TriggerMode.TIME
        assert sj.interval == 5
        assert sj.limit is None
        assert sj.detach is False
        assert sj.run_count == 0
        assert sj.is_exhausted is False
        assert isinstance(sj.trigger, TimeTrigger)

    def test_tick_mode_alias(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, mode="c", interval=3)
        assert isinstance(sj.trigger, TickTrigger)

    def test_unknown_mode_raises(self, recording_job, fake_clock):
        with pytest.raises(InvalidTriggerModeError):
            _make(recording_job, fake_clock, mode="x")

    @pytest.mark.parametrize("limit", [-1, 1.5, "2", True])
    def test_bad_limit_raises(self, recording_job, fake_clock, limit):
        with pytest.raises(ValidationError):
            _make(recording_job, fake_clock, interval=1, limit=limit)

    def test_object_without_run_rejected(self, fake_clock):
        with pytest.raises(ValidationError):
            _make(object(), fake_clock)

    def test_function_job(self, fake_clock):
        calls = []
        sj = _make(FunctionJob(lambda: calls.append(1), name="fn"), fake_clock)
        assert sj.name == "fn"
        assert sj.run() is True
        assert calls == [1]


# ---------------------------------------------------------------------------
# run(): trigger gate
# ---------------------------------------------------------------------------
class TestRunTimeMode:
    def test_fires_immediately_then_waits_interval(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5)
        assert sj.run() is True
        assert sj.run() is False
        fake_clock.advance(seconds=4)
        assert sj.run() is False
        fake_clock.advance(seconds=1)
        assert sj.run() is True
        assert recording_job.calls == 2

    def test_cursor_delays_first_fire(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, cursor=2)
        assert sj.run() is False
        fake_clock.advance(seconds=9)
        assert sj.run() is False
        fake_clock.advance(seconds=1)
        assert sj.run() is True

    def test_start_time_in_future(self, recording_job, fake_clock):
        start = fake_clock.now() + timedelta(minutes=1)
        sj = _make(recording_job, fake_clock, interval=5, start_time=start)
        assert sj.run() is False
        fake_clock.advance(minutes=1)
        assert sj.run() is True


class TestRunTickMode:
    def test_default_cursor_fires_first(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, mode="tick", interval=3)
        assert sj.run() is True

    def test_fires_every_third_call(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, mode="tick", interval=3, cursor=0)
        assert [sj.run() for _ in range(6)] == [False, False, True, False, False, True]
        assert recording_job.calls == 2

    def test_start_time_gates_ticks(self, recording_job, fake_clock):
        start = fake_clock.now() + timedelta(seconds=30)
        sj = _make(recording_job, fake_clock, mode="tick", interval=1, start_time=start)
        assert sj.run() is False
        fake_clock.advance(seconds=30)
        assert sj.run() is True


# ---------------------------------------------------------------------------
# run(): limit gate
# ---------------------------------------------------------------------------
class TestLimit:
    def test_fires_at_most_limit_times(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=0, limit=2)
        assert [sj.run() for _ in range(5)] == [True, True, False, False, False]
        assert recording_job.calls == 2
        assert sj.run_count == 2
        assert sj.is_exhausted

    def test_exhausted_job_does_not_evaluate_trigger(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, mode="tick", interval=1, cursor=0, limit=1)
        assert sj.run() is True
        cursor = sj.trigger.cursor
        for _ in range(3):
            assert sj.run() is False
        assert sj.trigger.cursor == cursor

    def test_zero_limit_is_unlimited(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=0, limit=0)
        assert all(sj.run() for _ in range(10))
        assert sj.run_count == 0

    def test_count_not_tracked_without_limit(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=0)
        sj.run()
        assert sj.run_count == 0

    def test_failed_inline_run_is_not_counted(self, fake_clock):
        job = FailingJob()
        sj = _make(job, fake_clock, interval=0, limit=1)
        with pytest.raises(RuntimeError, match="job failed"):
            sj.run()
        assert sj.run_count == 0
        assert sj.is_exhausted is False


# ---------------------------------------------------------------------------
# run(): execution modes
# ---------------------------------------------------------------------------
class TestExecution:
    def test_inline_error_propagates(self, fake_clock):
        sj = _make(FailingJob(ValueError("bad input")), fake_clock)
        with pytest.raises(ValueError, match="bad input"):
            sj.run()

    def test_detached_spawns_worker(self, recording_job, fake_clock):
        context = FakeProcessContext()
        sj = _make(
            recording_job,
            fake_clock,
            interval=0,
            limit=3,
            detach=True,
            executor=DetachedExecutor(context=context),
        )
        assert sj.run() is True
        assert len(context.started) == 1
        process = context.started[0]
        assert process.args == (recording_job,)
        assert process.name == "mp-scheduler:recording"
        # The job runs in the worker, not in the parent.
        assert recording_job.calls == 0
        assert sj.run_count == 1

    def test_detached_worker_target_runs_job(self, recording_job, fake_clock):
        context = FakeProcessContext(run_target=True)
        sj = _make(recording_job, fake_clock, detach=True, executor=DetachedExecutor(context=context))
        sj.run()
        assert recording_job.calls == 1

    def test_detached_job_errors_are_not_observed(self, fake_clock):
        context = FakeProcessContext()
        sj = _make(FailingJob(), fake_clock, detach=True, executor=DetachedExecutor(context=context))
        assert sj.run() is True

    def test_spawn_failure_warns_and_returns_false(self, recording_job, fake_clock):
        context = FakeProcessContext(fail_with=OSError("Resource temporarily unavailable"))
        sj = _make(
            recording_job,
            fake_clock,
            interval=0,
            limit=2,
            detach=True,
            executor=DetachedExecutor("fork", context=context),
        )
        with structlog.testing.capture_logs() as logs:
            assert sj.run() is False
        assert sj.run_count == 0
        warning = next(e for e in logs if e["event"] == "scheduled_job.spawn_failed")
        assert warning["log_level"] == "warning"
        assert warning["error"]["code"] == "spawn_error"
        assert "Resource temporarily unavailable" in warning["error"]["cause"]

    def test_spawn_failure_is_not_retried(self, recording_job, fake_clock):
        context = FakeProcessContext(fail_with=OSError("no"))
        sj = _make(
            recording_job,
            fake_clock,
            interval=10,
            detach=True,
            executor=DetachedExecutor(context=context),
        )
        assert sj.run() is False
        # The trigger already advanced; nothing is due until the next interval.
        context.fail_with = None
        assert sj.run() is False
        assert context.started == []


# ---------------------------------------------------------------------------
# authenticate / update
# ---------------------------------------------------------------------------
class TestAuthenticate:
    def test_matching_secret(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, secret="s3cret")
        assert sj.authenticate("s3cret")
        assert not sj.authenticate("wrong")
        assert not sj.authenticate(None)

    def test_no_secret_matches_none_only(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock)
        assert sj.authenticate(None)
        assert not sj.authenticate("")


class TestUpdate:
    def test_wrong_secret_changes_nothing(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, limit=3, secret="s")
        other = RecordingJob("other")
        ok = sj.update(
            {"job": other, "interval": 60, "limit": 9, "detach": True, "secret": "new"},
            "wrong",
        )
        assert ok is False
        assert sj.job is recording_job
        assert sj.interval == 5
        assert sj.limit == 3
        assert sj.detach is False
        assert sj.authenticate("s")

    def test_apply_returns_unauthorized(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, secret="s")
        result = sj.apply({"interval": 1}, "nope")
        assert result.is_err()
        assert isinstance(result.error, UnauthorizedError)

    def test_correct_secret_overwrites_recognised_fields(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, secret="s")
        other = RecordingJob("other")
        ok = sj.update(
            {
                "job": other,
                "interval": 60,
                "limit": 4,
                "detach": True,
                "secret": "rotated",
                "cursor": 99,
                "colour": "blue",
            },
            "s",
        )
        assert ok is True
        assert sj.job is other
        assert sj.interval == 60
        assert sj.limit == 4
        assert sj.detach is True
        assert sj.authenticate("rotated")
        assert not sj.authenticate("s")
        assert not hasattr(sj, "colour")

    def test_update_with_job_update(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, limit=2)
        assert sj.update(JobUpdate(limit=None))
        assert sj.limit is None
        assert sj.interval == 5

    def test_raising_limit_reopens_exhausted_job(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=0, limit=1, secret="s")
        assert sj.run()
        assert not sj.run()
        assert sj.update({"limit": 2}, "s")
        assert sj.run()
        assert not sj.run()

    def test_clearing_limit_reopens_exhausted_job(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=0, limit=1, secret="s")
        sj.run()
        assert sj.update({"limit": None}, "s")
        assert sj.run()

    def test_interval_change_keeps_trigger_position(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, secret="s")
        assert sj.run()
        trigger = sj.trigger
        assert sj.update({"interval": 60}, "s")
        assert sj.trigger is trigger
        fake_clock.advance(seconds=5)
        assert sj.run()
        fake_clock.advance(seconds=5)
        assert not sj.run()

    def test_mode_change_rebuilds_trigger(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=60, secret="s")
        assert sj.run()
        assert sj.update({"mode": "tick", "interval": 2}, "s")
        assert isinstance(sj.trigger, TickTrigger)
        assert sj.mode is TriggerMode.TICK
        assert [sj.run() for _ in range(3)] == [True, False, True]

    def test_invalid_mode_leaves_job_untouched(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, secret="s")
        trigger = sj.trigger
        result = sj.apply({"mode": "weekly", "limit": 3, "detach": True}, "s")
        assert result.is_err()
        assert isinstance(result.error, InvalidTriggerModeError)
        assert sj.trigger is trigger
        assert sj.limit is None
        assert sj.detach is False

    def test_invalid_interval_rejected(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, interval=5, secret="s")
        assert sj.update({"interval": -5}, "s") is False
        assert sj.interval == 5

    def test_refused_update_is_logged_without_secret(self, recording_job, fake_clock):
        sj = _make(recording_job, fake_clock, secret="hunter2")
        with structlog.testing.capture_logs() as logs:
            sj.update({"interval": 1}, "guess")
        assert logs[0]["event"] == "scheduled_job.update_refused"
        assert "hunter2" not in repr(logs)
        assert "guess" not in repr(logs)
