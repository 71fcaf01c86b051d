"""Testing support – fakes and pytest fixtures.

Import in your ``conftest.py``::

    pytest_plugins = ["mp_scheduler.testing.fixtures"]
"""

from mp_scheduler.testing.fakes import (
    FailingJob,
    FakeClock,
    FakeProcess,
    FakeProcessContext,
    FileTouchJob,
    FrozenClock,
    RecordingJob,
    SleepingJob,
)

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
