# tests/conftest.py
"""Pytest configuration with shared fixtures for the atpoint tests."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Generator
from unittest.mock import MagicMock

import pytest

from atpoint.core.PointContext import PointContext
from atpoint.utils.utils import DEFAULT_CONFIG, deep_merge
from tests.stubs import StubHost


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr for testing UI components.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def default_config() -> dict[str, Any]:
    """A private copy of the built-in configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def no_clipboard_config(default_config: dict[str, Any]) -> dict[str, Any]:
    """Built-in configuration with the system clipboard turned off."""
    return deep_merge(default_config, {"editor": {"use_system_clipboard": False}})


# --- Host and context fixtures ---
@pytest.fixture
def stub_host() -> StubHost:
    """A stub editor host with an empty buffer."""
    return StubHost()


@pytest.fixture
def make_context() -> Callable[..., PointContext]:
    """Factory building a `PointContext` from a single line or a list of lines.

    Example:
        ctx = make_context("see https://example.com", x=6, filename="a.txt")
    """

    def _make(
        text: str | list[str],
        x: int = 0,
        y: int = 0,
        filename: str | None = None,
        mode: str | None = None,
        probes: dict[str, Any] | None = None,
    ) -> PointContext:
        lines = [text] if isinstance(text, str) else text
        return PointContext(lines, y, x, filename=filename, mode=mode, probes=probes)

    return _make


# --- Logging fixtures ---
@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Restore root and trigger logger state after tests that call `setup_logging`."""
    root = logging.getLogger()
    trigger = logging.getLogger("atpoint.triggers")
    saved_root = (list(root.handlers), root.level)
    saved_trigger = (list(trigger.handlers), trigger.level, trigger.propagate, trigger.disabled)
    yield
    for handler in root.handlers:
        if handler not in saved_root[0]:
            handler.close()
    for handler in trigger.handlers:
        if handler not in saved_trigger[0]:
            handler.close()
    root.handlers, root.level = saved_root
    trigger.handlers, trigger.level, trigger.propagate, trigger.disabled = saved_trigger
