"""Unit tests for observability logging."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from mp_scheduler.kernel.security import DEFAULT_SENSITIVE_FIELDS
from mp_scheduler.observability.logging import (
    JsonLoggerFactory,
    SchedulerContextProcessor,
    SensitiveFieldsFilter,
    get_logger,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    structlog.reset_defaults()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


# ---------------------------------------------------------------------------
# SensitiveFieldsFilter
# ---------------------------------------------------------------------------


class TestSensitiveFieldsFilter:
    def test_default_fields(self) -> None:
        f = SensitiveFieldsFilter()
        assert f.redact({"secret": "s", "job": "j"}) == {"secret": "[REDACTED]", "job": "j"}

    def test_case_insensitive(self) -> None:
        assert SensitiveFieldsFilter().redact({"Key": "k"}) == {"Key": "[REDACTED]"}

    def test_redact_deep(self) -> None:
        data = {"options": {"key": "k", "interval": 5}, "job": "j"}
        assert SensitiveFieldsFilter().redact_deep(data) == {
            "options": {"key": "[REDACTED]", "interval": 5},
            "job": "j",
        }

    def test_custom_fields(self) -> None:
        f = SensitiveFieldsFilter(frozenset({"pid"}))
        assert f.redact({"pid": 1, "secret": "s"}) == {"pid": "[REDACTED]", "secret": "s"}

    def test_processor_form(self) -> None:
        out = SensitiveFieldsFilter()(None, "info", {"event": "x", "token": "t"})
        assert out == {"event": "x", "token": "[REDACTED]"}

    def test_defaults_exposed(self) -> None:
        assert "secret" in DEFAULT_SENSITIVE_FIELDS


# ---------------------------------------------------------------------------
# Processors / get_logger
# ---------------------------------------------------------------------------


class TestSchedulerContextProcessor:
    def test_adds_component(self) -> None:
        out = SchedulerContextProcessor("billing")(None, "info", {"event": "x"})
        assert out["component"] == "billing"

    def test_keeps_existing_component(self) -> None:
        out = SchedulerContextProcessor()(None, "info", {"event": "x", "component": "mine"})
        assert out["component"] == "mine"


class TestGetLogger:
    def test_bound_values_reach_events(self) -> None:
        with structlog.testing.capture_logs() as logs:
            get_logger("tests", sweep=3).info("scheduler.tick")
        assert logs == [{"event": "scheduler.tick", "sweep": 3, "log_level": "info"}]


# ---------------------------------------------------------------------------
# JsonLoggerFactory
# ---------------------------------------------------------------------------


class TestJsonLoggerFactory:
    def test_emits_redacted_json(self, restore_logging, capsys) -> None:
        JsonLoggerFactory.configure(level=logging.INFO)
        structlog.get_logger("tests.json").info("scheduler.job_registered", job="j", secret="s")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "scheduler.job_registered"
        assert payload["job"] == "j"
        assert payload["secret"] == "[REDACTED]"
        assert payload["component"] == "mp_scheduler"
        assert payload["level"] == "info"
        assert "timestamp" in payload

    def test_accepts_level_name(self, restore_logging) -> None:
        JsonLoggerFactory.configure(level="debug")
        assert restore_logging.level == logging.DEBUG

    def test_replaces_root_handlers(self, restore_logging) -> None:
        JsonLoggerFactory.configure()
        assert len(restore_logging.handlers) == 1
