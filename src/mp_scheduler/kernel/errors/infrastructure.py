"""Infrastructure errors — process and OS level failures."""

from __future__ import annotations

from typing import Any

from mp_scheduler.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / OS failure that is not a scheduling rule violation."""

    default_code = "infrastructure_error"


class SpawnError(InfrastructureError):
    """A detached worker process could not be started."""

    default_code = "spawn_error"

    def __init__(
        self,
        message: str = "Could not spawn detached worker",
        *,
        start_method: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.start_method = start_method


__all__ = ["InfrastructureError", "SpawnError"]
