"""Observability – structured logging."""
from mp_scheduler.observability.logging import (
    JsonLoggerFactory,
    SchedulerContextProcessor,
    SensitiveFieldsFilter,
    get_logger,
)

__all__ = [
    "JsonLoggerFactory",
    "SchedulerContextProcessor",
    "SensitiveFieldsFilter",
    "get_logger",
]
