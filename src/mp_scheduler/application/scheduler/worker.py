"""Application scheduler – entry point of a spawned worker process.

Run as ``python -m mp_scheduler.application.scheduler.worker`` with a pickled
``(target, args)`` pair on standard input.  Errors raised by the target end
the process with a traceback and a non-zero status.
"""
from __future__ import annotations

import pickle
import sys


def main() -> None:
    target, args = pickle.load(sys.stdin.buffer)
    target(*args)


if __name__ == "__main__":
    main()
