"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from habitpulse.config import BaseConfig
from habitpulse.errors import InvalidCalendarDay, fails_closed
from habitpulse.logging_config import JSONFormatter, get_logger, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=kwargs.pop("msg", "Test message"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    """Test that JSONFormatter correctly formats log records."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    """Test that JSONFormatter correctly handles exceptions."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_includes_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(habit_id="h1", day="2024-01-15")))
    assert log_data["extra"] == {"habit_id": "h1", "day": "2024-01-15"}


def test_setup_logging(tmp_path):
    """Test that logging setup creates log files with rotation."""
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "habitpulse"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "habitpulse.log"
    assert log_file.exists()

    logger.info("Test info message")
    get_logger("services.streaks").warning("Child message", extra={"habit_id": "h1"})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text().splitlines() if line.strip()]
    assert len(lines) >= 3
    entries = [json.loads(line) for line in lines]
    for entry in entries:
        assert "timestamp" in entry
        assert "level" in entry
        assert "message" in entry
    assert entries[-1]["logger"] == "habitpulse.services.streaks"
    assert entries[-1]["extra"] == {"habit_id": "h1"}


def test_setup_logging_is_idempotent(tmp_path):
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)
    setup_logging(config)
    logger = setup_logging(config)
    assert len(logger.handlers) == 2


def test_get_logger():
    """Test that get_logger returns properly namespaced loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "habitpulse.module1"
    assert logger2.name == "habitpulse.module2"
    assert logger1 != logger2
    assert get_logger("habitpulse.cli").name == "habitpulse.cli"


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Test that console logging level adjusts based on dev mode."""
    config = BaseConfig()
    config.DATA_DIR = str(tmp_path)
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = None
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.handlers.RotatingFileHandler
        ):
            console_handler = handler
            break

    assert console_handler is not None

    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level


def test_fails_closed_logs_and_returns_default(caplog):
    @fails_closed(dict)
    def explode():
        raise InvalidCalendarDay("nope")

    with caplog.at_level(logging.WARNING, logger="habitpulse.errors"):
        first = explode()
        second = explode()

    assert first == {} and second == {}
    assert first is not second
    assert "explode failed closed" in caplog.text
    assert caplog.records[0].error_type == "InvalidCalendarDay"


def test_fails_closed_lets_programming_errors_through():
    @fails_closed(False)
    def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        broken()
