# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `atpoint.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Attaches a trace file to `atpoint.triggers` only when ATPOINT_KEYTRACE is set.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging
import logging.handlers

import pytest

from atpoint.utils import logging_config

pytestmark = pytest.mark.usefixtures("restore_logging")


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.

    Assertions:
    - Exactly two handlers (main file + error file), both rotating.
    - Handler levels match the configuration.
    """
    monkeypatch.chdir(tmp_path)

    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    root = logging.getLogger()
    assert len(root.handlers) == 2
    assert all(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert (tmp_path / "atpoint.log").exists()
    assert (tmp_path / "error.log").exists()


def test_console_handler_and_custom_log_file(tmp_path, monkeypatch) -> None:
    """A nested `log_file` gets its directory created; console level is honored."""
    monkeypatch.chdir(tmp_path)
    log_file = tmp_path / "logs" / "custom.log"

    logging_config.setup_logging(
        {"logging": {"log_file": str(log_file), "console_level": "error", "file_level": "bogus"}}
    )

    root = logging.getLogger()
    assert len(root.handlers) == 2
    file_handler, console_handler = root.handlers
    assert isinstance(file_handler, logging.handlers.RotatingFileHandler)
    assert file_handler.level == logging.DEBUG  # unknown level names fall back to DEBUG
    assert type(console_handler) is logging.StreamHandler
    assert console_handler.level == logging.ERROR
    assert log_file.exists()


def test_trigger_trace_disabled_by_default(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)

    logging_config.setup_logging({"logging": {"log_to_console": False}})

    trigger = logging.getLogger("atpoint.triggers")
    assert trigger.disabled
    assert not trigger.propagate
    assert [type(h) for h in trigger.handlers] == [logging.NullHandler]
    assert not (tmp_path / "triggertrace.log").exists()


@pytest.mark.parametrize("value", ["1", "true", "YES"])
def test_trigger_trace_enabled_by_env(tmp_path, monkeypatch, value: str) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(logging_config.KEYTRACE_ENV, value)

    logging_config.setup_logging({"logging": {"log_to_console": False}})

    trigger = logging.getLogger("atpoint.triggers")
    assert not trigger.disabled
    assert len(trigger.handlers) == 1
    assert isinstance(trigger.handlers[0], logging.handlers.RotatingFileHandler)
    assert (tmp_path / "triggertrace.log").exists()


def test_setup_logging_is_idempotent(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = {"logging": {"log_to_console": False}}

    logging_config.setup_logging(config)
    first = list(logging.getLogger().handlers)
    logging_config.setup_logging(config)

    assert len(logging.getLogger().handlers) == 1
    for handler in first:
        handler.close()
