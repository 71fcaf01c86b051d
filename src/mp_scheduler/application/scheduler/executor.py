"""Application scheduler – detached execution in a worker process.

A detached job runs in a separate OS process.  With ``fork`` the worker is a
plain ``os.fork`` child that runs the job and calls ``os._exit``; with
``spawn`` it is a fresh interpreter started through :mod:`subprocess` in its
own session, which unpickles the job from standard input.

Neither kind is registered with :mod:`multiprocessing`, so nothing joins a
worker when the parent interpreter exits.  The parent only reaps workers
that have already finished and never sees their outcome.  The worker must
not rely on anything the parent had open: output belongs in files or
connections the job opens itself.
"""
from __future__ import annotations

import os
import pickle
import subprocess
import sys
import traceback
from typing import Any, Callable

from mp_scheduler.application.scheduler.job import Job, job_name
from mp_scheduler.kernel.errors import SpawnError
from mp_scheduler.kernel.types import Err, Ok, Result

__all__ = ["DetachedExecutor", "START_METHODS", "default_start_method"]

START_METHODS = ("fork", "spawn")

WORKER_MODULE = "mp_scheduler.application.scheduler.worker"


def default_start_method() -> str:
    """``fork`` where the platform offers it, ``spawn`` otherwise.

    ``fork`` does not require the job to be picklable.
    """
    return "fork" if hasattr(os, "fork") else "spawn"


def _run_detached(job: Job) -> None:
    # Worker entry point; the process exits when this returns or raises.
    job.run()


class _ForkedWorker:
    """A child created with ``os.fork``; it never returns into the caller's code."""

    def __init__(self, target: Callable[..., Any], args: tuple[Any, ...], name: str | None) -> None:
        self.target = target
        self.args = args
        self.name = name
        self.pid: int | None = None

    def start(self) -> None:
        pid = os.fork()
        if pid == 0:
            status = 1
            try:
                self.target(*self.args)
                status = 0
            except BaseException:  # noqa: BLE001
                traceback.print_exc()
            finally:
                sys.stdout.flush()
                sys.stderr.flush()
                os._exit(status)
        self.pid = pid

    def finished(self) -> bool:
        if self.pid is None:
            return True
        try:
            reaped, _ = os.waitpid(self.pid, os.WNOHANG)
        except ChildProcessError:
            return True
        return reaped != 0


class _SpawnedWorker:
    """A fresh interpreter running :mod:`WORKER_MODULE` in a new session."""

    def __init__(self, target: Callable[..., Any], args: tuple[Any, ...], name: str | None) -> None:
        self.target = target
        self.args = args
        self.name = name
        self.pid: int | None = None
        self._popen: subprocess.Popen[bytes] | None = None

    def start(self) -> None:
        payload = pickle.dumps((self.target, self.args))
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(path for path in sys.path if path)
        self._popen = subprocess.Popen(
            [sys.executable, "-m", WORKER_MODULE],
            stdin=subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
        self.pid = self._popen.pid
        assert self._popen.stdin is not None
        try:
            self._popen.stdin.write(payload)
        finally:
            self._popen.stdin.close()

    def finished(self) -> bool:
        return self._popen is None or self._popen.poll() is not None


class WorkerContext:
    """Creates untracked worker processes for one start method.

    Exposes the ``Process(target, args, name)`` factory the executor calls,
    so a recording double can stand in for it in tests.
    """

    def __init__(self, start_method: str) -> None:
        if start_method not in START_METHODS:
            raise ValueError(
                f"Unknown start method {start_method!r}; expected one of {', '.join(START_METHODS)}"
            )
        if start_method == "fork" and not hasattr(os, "fork"):
            raise ValueError("The fork start method is not available on this platform")
        self._worker_type = _ForkedWorker if start_method == "fork" else _SpawnedWorker
        self._workers: list[_ForkedWorker | _SpawnedWorker] = []

    def Process(  # noqa: N802
        self,
        target: Callable[..., Any],
        args: tuple[Any, ...] = (),
        name: str | None = None,
    ) -> _ForkedWorker | _SpawnedWorker:
        # Reap workers that already exited so they do not linger as zombies.
        self._workers = [worker for worker in self._workers if not worker.finished()]
        worker = self._worker_type(target, args, name)
        self._workers.append(worker)
        return worker


class DetachedExecutor:
    """Start jobs in independent worker processes.

    Parameters
    ----------
    start_method:
        ``fork`` or ``spawn``.  Defaults to :func:`default_start_method`.
    context:
        Any object with a ``Process(target, args, name)`` factory, such as
        :class:`~mp_scheduler.testing.FakeProcessContext`.  Overrides
        *start_method* when given.
    """

    def __init__(self, start_method: str | None = None, *, context: Any | None = None) -> None:
        if context is None:
            start_method = start_method or default_start_method()
            context = WorkerContext(start_method)
        self._context = context
        self._start_method = start_method

    @property
    def start_method(self) -> str | None:
        return self._start_method

    def spawn(self, job: Job) -> Result[int | None, SpawnError]:
        """Start a worker running ``job.run()``; return its pid or the failure."""
        process = self._context.Process(
            target=_run_detached,
            args=(job,),
            name=f"mp-scheduler:{job_name(job)}",
        )
        try:
            process.start()
        except Exception as exc:  # noqa: BLE001
            return Err(
                SpawnError(
                    f"Could not spawn worker for {job_name(job)}",
                    start_method=self._start_method,
                    cause=exc,
                )
            )
        return Ok(process.pid)
