"""Testing fakes – in-memory doubles for scheduler ports."""
from mp_scheduler.kernel.time import FrozenClock
from mp_scheduler.testing.fakes.clock import FakeClock
from mp_scheduler.testing.fakes.jobs import (
    FailingJob,
    FileTouchJob,
    RecordingJob,
    SleepingJob,
)
from mp_scheduler.testing.fakes.process import FakeProcess, FakeProcessContext

__all__ = [
    "FailingJob",
    "FakeClock",
    "FakeProcess",
    "FakeProcessContext",
    "FileTouchJob",
    "FrozenClock",
    "RecordingJob",
    "SleepingJob",
]
