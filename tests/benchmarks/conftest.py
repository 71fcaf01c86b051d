"""conftest.py for benchmarks.

Provides pre-populated schedulers so each benchmark measures the sweep
itself rather than registration.
"""

from __future__ import annotations

import pytest

from mp_scheduler.application.scheduler import Scheduler
from mp_scheduler.testing import FakeClock, RecordingJob


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def populated_scheduler(fake_clock):
    """Factory: ``populated_scheduler(n, mode, **options)`` registers *n* jobs."""

    def _build(count: int, mode: str = "time", **options) -> Scheduler:
        scheduler = Scheduler(clock=fake_clock)
        for i in range(count):
            scheduler.schedule_job(RecordingJob(f"job-{i}"), mode, {"id": f"job-{i}", **options})
        return scheduler

    return _build
