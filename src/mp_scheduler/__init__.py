"""
mp_scheduler – embeddable in-process job scheduler.

Import path convention::

    from mp_scheduler.application.scheduler import Scheduler, ScheduledJob
    from mp_scheduler.kernel.errors import InvalidTriggerModeError
    from mp_scheduler.testing import FakeClock, RecordingJob
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
