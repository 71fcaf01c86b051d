"""Observability – get_logger helper and scheduler context processor."""
from __future__ import annotations

from typing import Any

import structlog


class SchedulerContextProcessor:
    """structlog processor that stamps every event with a fixed component name.

    Usage::

        structlog.configure(processors=[SchedulerContextProcessor("billing"), ...])
    """

    def __init__(self, component: str = "mp_scheduler") -> None:
        self._component = component

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,      # noqa: ARG002
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        event_dict.setdefault("component", self._component)
        return event_dict


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


__all__ = ["SchedulerContextProcessor", "get_logger"]
