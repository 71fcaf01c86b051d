"""Kernel time – Clock port + implementations."""
from mp_scheduler.kernel.time.clock import Clock, FrozenClock, SystemClock, to_timestamp, utc_now

__all__ = ["Clock", "FrozenClock", "SystemClock", "to_timestamp", "utc_now"]
