"""Domain errors — schedule rule and invariant violations."""

from __future__ import annotations

from typing import Any

from mp_scheduler.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a scheduling rule / invariant is violated."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Input data does not meet validation rules.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class InvalidTriggerModeError(ValidationError):
    """The trigger mode is neither time- nor tick-based."""

    default_code = "invalid_trigger_mode"

    def __init__(self, mode: Any, **kwargs: Any) -> None:
        super().__init__(
            f"Unknown trigger mode {mode!r}",
            errors=[{"field": "mode", "value": repr(mode)}],
            **kwargs,
        )
        self.mode = mode


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"


class DuplicateJobIdError(ConflictError):
    """A job is already registered under the requested id."""

    default_code = "duplicate_job_id"

    def __init__(self, job_id: str, **kwargs: Any) -> None:
        super().__init__(f"Job '{job_id}' is already scheduled", **kwargs)
        self.job_id = job_id


__all__ = [
    "ConflictError",
    "DomainError",
    "DuplicateJobIdError",
    "InvalidTriggerModeError",
    "ValidationError",
]
