"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError            (domain.py)
    │   ├── ValidationError
    │   │   └── InvalidTriggerModeError
    │   └── ConflictError
    │       └── DuplicateJobIdError
    ├── ApplicationError       (application.py)
    │   └── UnauthorizedError
    └── InfrastructureError    (infrastructure.py)
        └── SpawnError
"""

from mp_scheduler.kernel.errors.application import ApplicationError, UnauthorizedError
from mp_scheduler.kernel.errors.base import BaseError
from mp_scheduler.kernel.errors.domain import (
    ConflictError,
    DomainError,
    DuplicateJobIdError,
    InvalidTriggerModeError,
    ValidationError,
)
from mp_scheduler.kernel.errors.infrastructure import InfrastructureError, SpawnError

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
