"""Unit tests for logging setup."""
from __future__ import annotations

import json
import logging

import pytest
import structlog

from alertbridge.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_structlog():
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


@pytest.mark.unit
def test_json_logs(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("info", json_logs=True)

    structlog.get_logger("alertbridge.test").info("webhook_queued", chat_id=123)

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["event"] == "webhook_queued"
    assert line["chat_id"] == 123
    assert line["level"] == "info"
    assert "timestamp" in line


@pytest.mark.unit
def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("WARNING", json_logs=True)

    structlog.get_logger("alertbridge.test").info("message_received")

    assert capsys.readouterr().out == ""


@pytest.mark.unit
def test_noisy_loggers_quieted() -> None:
    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.unit
def test_modules_log_through_structlog_directly() -> None:
    import alertbridge.utils as utils
    import alertbridge.utils.logging as logging_utils

    assert not hasattr(logging_utils, "get_logger")
    assert "get_logger" not in utils.__all__
