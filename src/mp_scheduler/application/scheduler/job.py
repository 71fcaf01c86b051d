"""Application scheduler – Job capability."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

__all__ = ["FunctionJob", "Job", "job_name"]


@runtime_checkable
class Job(Protocol):
    """A unit of work with a single ``run`` method.

    ``run`` takes no arguments and returns nothing; failure is signalled by
    raising.  A job that needs input must fetch it itself, for example
    through a callback on the object that owns it.
    """

    def run(self) -> None: ...


@dataclass(frozen=True)
class FunctionJob:
    """Adapt a zero-argument callable to the :class:`Job` protocol."""

    func: Callable[[], Any]
    name: str = ""

    def run(self) -> None:
        self.func()


def job_name(job: Any) -> str:
    """Best-effort label for log events."""
    name = getattr(job, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(job).__name__
