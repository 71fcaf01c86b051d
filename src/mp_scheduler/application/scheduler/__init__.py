"""Application scheduler – triggers, scheduled jobs and the dispatch registry."""
from mp_scheduler.application.scheduler.executor import DetachedExecutor, default_start_method
from mp_scheduler.application.scheduler.job import FunctionJob, Job
from mp_scheduler.application.scheduler.options import JobUpdate, ScheduleOptions
from mp_scheduler.application.scheduler.ports import ScheduleChannel, ScheduleStore
from mp_scheduler.application.scheduler.scheduled_job import ScheduledJob
from mp_scheduler.application.scheduler.scheduler import (
    JobFailure,
    ScheduleEntry,
    Scheduler,
    SweepReport,
)
from mp_scheduler.application.scheduler.settings import SchedulerSettings, configure_logging
from mp_scheduler.application.scheduler.trigger import (
    TickTrigger,
    TimeTrigger,
    TriggerMode,
    TriggerPolicy,
    build_trigger,
)

__all__ = [
    "DetachedExecutor",
    "FunctionJob",
    "Job",
    "JobFailure",
    "JobUpdate",
    "ScheduleChannel",
    "ScheduleEntry",
    "ScheduleOptions",
    "ScheduleStore",
    "ScheduledJob",
    "Scheduler",
    "SchedulerSettings",
    "SweepReport",
    "TickTrigger",
    "TimeTrigger",
    "TriggerMode",
    "TriggerPolicy",
    "build_trigger",
    "configure_logging",
    "default_start_method",
]
