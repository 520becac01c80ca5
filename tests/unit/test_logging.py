"""Unit tests for logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from devflow_orchestrator.orchestrator.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="devflow.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="%s failed, but continuing",
        args=("Monitor GitHub Actions",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(step="monitor", elapsed_seconds=1.5)))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "devflow.test"
    assert payload["message"] == "Monitor GitHub Actions failed, but continuing"
    assert payload["extra"] == {"step": "monitor", "elapsed_seconds": 1.5}
    assert payload["timestamp"].endswith("+00:00")


def test_json_formatter_omits_empty_extra() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert "extra" not in payload
    assert "exception" not in payload


def test_configure_logging_installs_single_stderr_handler(restore_root_logger: None) -> None:
    configure_logging("debug", "json")
    configure_logging("warning", "json")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING
