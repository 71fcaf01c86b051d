"""Testing fixtures – load with ``pytest_plugins = ["mp_scheduler.testing.fixtures"]``."""
from mp_scheduler.testing.fixtures.clock import fake_clock, recording_job

__all__ = ["fake_clock", "recording_job"]
