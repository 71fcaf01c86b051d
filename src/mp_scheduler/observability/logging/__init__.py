"""Observability – structured logging helpers."""
from mp_scheduler.observability.logging.factory import JsonLoggerFactory
from mp_scheduler.observability.logging.filters import SensitiveFieldsFilter
from mp_scheduler.observability.logging.processors import SchedulerContextProcessor, get_logger

__all__ = [
    "JsonLoggerFactory",
    "SchedulerContextProcessor",
    "SensitiveFieldsFilter",
    "get_logger",
]
