"""Tests for structlog setup."""

import json
import logging

import pytest
import structlog

from preheat.core.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.mark.unit
def test_json_log_file_receives_events(tmp_path):
    log_file = tmp_path / "preheat.log"
    setup_logging(json_logs=True, log_level_name="INFO", log_file=str(log_file))

    get_logger("preheat.test").info("request_sent", method="GET", status_code=200)
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    event = next(line for line in lines if line["event"] == "request_sent")
    assert event["method"] == "GET"
    assert event["status_code"] == 200
    assert event["level"] == "info"
    assert event["logger"] == "preheat.test"
    assert "timestamp" in event


@pytest.mark.unit
def test_level_filters_events(tmp_path):
    log_file = tmp_path / "preheat.log"
    setup_logging(log_level_name="WARNING", log_file=str(log_file))

    logger = get_logger("preheat.test")
    logger.info("hidden_event")
    logger.warning("shown_event")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text()
    assert "shown_event" in content
    assert "hidden_event" not in content


@pytest.mark.unit
def test_noisy_loggers_are_quieted():
    setup_logging(log_level_name="DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


@pytest.mark.unit
def test_get_logger_returns_structlog_logger():
    logger = get_logger(__name__)
    assert hasattr(logger, "bind")
    assert structlog.is_configured()
