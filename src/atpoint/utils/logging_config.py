# atpoint/utils/logging_config.py
"""atpoint.utils.logging_config
==============================

Logging configuration for atpoint. Defines the module-level loggers used
across the package and a single `setup_logging` function that installs the
handlers described by the ``[logging]`` section of the configuration.

Features:
    - Rotating file log for general events (atpoint.log).
    - Optional console logging to stderr with a configurable level.
    - Optional separate error log (error.log) for ERROR and CRITICAL events.
    - Optional trigger tracing (triggertrace.log), enabled with the
      ATPOINT_KEYTRACE environment variable.
    - Log directories are created on demand, falling back to the system temp
      directory on failure.
    - Safe to call repeatedly: existing root handlers are replaced.
    - Never raises; problems are reported to stderr.

Globals:
    logger: Main package logger ("atpoint").
    TRIGGER_LOGGER: Logger for menu key traces ("atpoint.triggers").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import time; unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("atpoint")
TRIGGER_LOGGER = logging.getLogger("atpoint.triggers")

KEYTRACE_ENV = "ATPOINT_KEYTRACE"


def _ensure_log_path(filename: str, fallback: str) -> str:
    """Creates the directory of `filename`, or returns a temp-dir fallback."""
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            filename = os.path.join(tempfile.gettempdir(), fallback)
            print(f"Logging to temporary file: '{filename}'", file=sys.stderr)
    return filename


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures package-wide logging handlers and levels.

    Up to four independent handlers are installed:

    1. File handler: rotating ``atpoint.log`` from ``file_level``
       (default DEBUG) upward.
    2. Console handler: optional stderr output at ``console_level``
       (default WARNING).
    3. Error-file handler: optional rotating ``error.log`` holding only
       ERROR and CRITICAL records.
    4. Trigger trace handler: rotating ``triggertrace.log`` attached to
       ``atpoint.triggers`` when ``ATPOINT_KEYTRACE`` is ``1/true/yes``.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is read; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console``,
            ``separate_error_log`` and ``log_file``.

    Side Effects:
        - Replaces all handlers on the root logger.
        - Configures ``atpoint.triggers`` to not propagate.

    Example:
        >>> setup_logging({"logging": {"file_level": "INFO", "log_to_console": False}})
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_filename = _ensure_log_path(logging_config.get("log_file", "atpoint.log"), "atpoint.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = _ensure_log_path("error.log", "atpoint-error.log")
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                error_log_filename, maxBytes=1 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Trigger trace logger
    trigger_logger = logging.getLogger("atpoint.triggers")
    trigger_logger.propagate = False
    trigger_logger.setLevel(logging.DEBUG)
    trigger_logger.handlers = []
    trigger_logger.disabled = False

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        try:
            trace_filename = _ensure_log_path("triggertrace.log", "atpoint-triggertrace.log")
            trace_handler = logging.handlers.RotatingFileHandler(
                trace_filename, maxBytes=1 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
            trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            trigger_logger.addHandler(trace_handler)
            logging.info("Trigger tracing enabled, logging to '%s'.", trace_filename)
        except Exception as e_trace:
            logging.error(f"Failed to set up trigger trace logging: {e_trace}", exc_info=True)
            trigger_logger.disabled = True
    else:
        trigger_logger.addHandler(logging.NullHandler())
        trigger_logger.disabled = True
        logging.debug("Trigger tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
