"""Application scheduler – SchedulerSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from mp_scheduler.application.scheduler.executor import START_METHODS
from mp_scheduler.config.settings import Settings
from mp_scheduler.config.validation import InvalidSettingValueError
from mp_scheduler.observability.logging import JsonLoggerFactory

__all__ = ["SchedulerSettings", "configure_logging"]

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclasses.dataclass
class SchedulerSettings(Settings):
    """Environment-driven scheduler configuration (``SCHEDULER_*``)."""

    _prefix: ClassVar[str] = "SCHEDULER"

    keys: list[str] = dataclasses.field(default_factory=list)
    pipe: str = ""
    schedule_file: str = ""
    allow_fatal: bool = False
    start_method: str = ""
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.start_method and self.start_method not in START_METHODS:
            raise InvalidSettingValueError(
                "start_method", self.start_method, f"expected one of {', '.join(START_METHODS)}"
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidSettingValueError(
                "log_level", self.log_level, f"expected one of {', '.join(_LOG_LEVELS)}"
            )

    @property
    def key(self) -> str | frozenset[str]:
        """A single key, or the set of accepted keys when several are configured."""
        if not self.keys:
            return ""
        if len(self.keys) == 1:
            return self.keys[0]
        return frozenset(self.keys)

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def configure_logging(settings: SchedulerSettings) -> None:
    """Apply the JSON logging setup at the configured level."""
    JsonLoggerFactory.configure(level=settings.level)
