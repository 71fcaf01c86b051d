"""Shared fixtures for unit tests."""

from mp_scheduler.testing.fixtures import fake_clock, recording_job  # noqa: F401
