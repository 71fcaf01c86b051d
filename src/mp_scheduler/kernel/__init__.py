"""Kernel – framework-agnostic building blocks."""

from mp_scheduler.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    DuplicateJobIdError,
    InfrastructureError,
    InvalidTriggerModeError,
    SpawnError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "DuplicateJobIdError",
    "InfrastructureError",
    "InvalidTriggerModeError",
    "SpawnError",
    "UnauthorizedError",
    "ValidationError",
]
