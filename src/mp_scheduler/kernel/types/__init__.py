"""Kernel types — public re-export surface."""

from mp_scheduler.kernel.types.result import Err, Ok, Result

__all__ = ["Err", "Ok", "Result"]
