"""Tests for structured logging setup and request context."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from panel_monitor.logging.context import bind_context, clear_context, series_context
from panel_monitor.logging.structured import (
    SERVICE_NAME,
    add_service_info,
    drop_none_values,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    clear_context()


def test_add_service_info() -> None:
    event = add_service_info(None, "info", {"event": "hello"})
    assert event["service"] == SERVICE_NAME
    assert "version" in event


def test_drop_none_values() -> None:
    event = drop_none_values(None, "info", {"event": "x", "date": None, "panel": "33kva"})
    assert event == {"event": "x", "panel": "33kva"}


def test_series_context_skips_none() -> None:
    clear_context()
    with series_context(panel="33kva", date=None):
        assert structlog.contextvars.get_contextvars() == {"panel": "33kva"}
    assert structlog.contextvars.get_contextvars() == {}


def test_json_lines_carry_request_context(restore_logging, capsys) -> None:
    setup_logging(level="INFO", fmt="json")
    bind_context(path="/api/total-power")
    with series_context(panel="66kva", metric="voltage"):
        logging.getLogger("panel_monitor.test").info("built %d points", 24)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "built 24 points"
    assert record["panel"] == "66kva"
    assert record["metric"] == "voltage"
    assert record["path"] == "/api/total-power"
    assert record["service"] == SERVICE_NAME
    assert record["level"] == "info"
