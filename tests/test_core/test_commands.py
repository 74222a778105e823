# tests/test_core/test_commands.py
"""Unit tests for command references, sticky markers and the command table."""

import logging
from unittest.mock import MagicMock, patch

import pyperclip
import pytest

from atpoint.core.Commands import (
    BoundAction,
    Clipboard,
    Command,
    CommandTable,
    CommandUnavailableError,
    StickyRegistry,
    action_label,
    unwrap_action,
)
from tests.stubs import StubHost


class TestCommand:
    def test_resolved_command_calls_function(self) -> None:
        func = MagicMock(return_value=True)
        command = Command("browse_url", func)

        assert command.available
        assert command("https://example.com") is True
        func.assert_called_once_with("https://example.com")

    def test_unresolved_command_raises(self) -> None:
        command = Command("browse_url")
        assert not command.available
        with pytest.raises(CommandUnavailableError):
            command("https://example.com")

    def test_label_defaults_to_name(self) -> None:
        assert Command("browse_url").label == "browse url"
        assert Command("copy_to_clipboard", label="copy").label == "copy"


def test_bound_action_invokes_with_value() -> None:
    action = MagicMock(return_value=5)
    bound = BoundAction(action, "value")

    assert bound() == 5
    action.assert_called_once_with("value")
    assert unwrap_action(bound) is action


def test_action_label() -> None:
    def find_references(value: str) -> None:
        return None

    assert action_label(Command("open_file")) == "open file"
    assert action_label(BoundAction(Command("open_file"), "x")) == "open file"
    assert action_label(find_references) == "find references"


class TestStickyRegistry:
    def test_mark_and_lookup_unwraps_bound_actions(self) -> None:
        command = Command("timestamp_up")
        sticky = StickyRegistry()
        sticky.mark(command)

        assert sticky.is_sticky(command)
        assert sticky.is_sticky(BoundAction(command, 1))
        assert BoundAction(command, 2) in sticky
        assert not sticky.is_sticky(Command("timestamp_up"))
        assert len(sticky) == 1

    def test_initial_actions(self) -> None:
        action = MagicMock()
        assert StickyRegistry([action]).is_sticky(action)


class TestClipboard:
    def test_copy_uses_pyperclip(self) -> None:
        clipboard = Clipboard()
        with patch("atpoint.core.Commands.pyperclip.copy") as mock_copy:
            assert clipboard.copy("hello") is True
        mock_copy.assert_called_once_with("hello")
        assert clipboard.internal == "hello"

    def test_copy_falls_back_to_internal(self) -> None:
        clipboard = Clipboard()
        with patch(
            "atpoint.core.Commands.pyperclip.copy",
            side_effect=pyperclip.PyperclipException("no clipboard"),
        ):
            assert clipboard.copy(42) is False
        assert clipboard.internal == "42"

    def test_system_clipboard_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        clipboard = Clipboard(use_system_clipboard=False)
        with (
            patch("atpoint.core.Commands.pyperclip.copy") as mock_copy,
            caplog.at_level(logging.DEBUG, logger="atpoint"),
        ):
            assert clipboard.copy("x") is False
        mock_copy.assert_not_called()
        assert clipboard.internal == "x"
        assert [r.name for r in caplog.records if "System clipboard disabled" in r.getMessage()] == ["atpoint"]


class TestCommandTable:
    def test_builtin_copy_to_clipboard(self) -> None:
        table = CommandTable(use_system_clipboard=False)
        command = table.get("copy_to_clipboard")

        assert "copy_to_clipboard" in table
        assert command is not None and command.label == "copy"
        command("text")
        assert table.clipboard.internal == "text"

    def test_inspection_mode_returns_interned_unresolved_commands(self) -> None:
        table = CommandTable()
        first = table.get("browse_url")

        assert first is not None and not first.available
        assert table.get("browse_url") is first

    def test_resolves_host_methods(self) -> None:
        host = StubHost()
        command = CommandTable(host).get("browse_url")

        assert command is not None and command.available
        command("https://example.com")
        assert host.called("browse_url") == [("https://example.com",)]

    def test_missing_host_method_warns_once(self, caplog: pytest.LogCaptureFixture) -> None:
        table = CommandTable(StubHost())
        with caplog.at_level(logging.WARNING, logger="atpoint"):
            assert table.get("rename_file") is None
            assert table.get("rename_file") is None

        warnings = [r for r in caplog.records if "rename_file" in r.getMessage()]
        assert len(warnings) == 1

    def test_register(self) -> None:
        table = CommandTable()
        func = MagicMock()
        command = table.register("shout", func, label="SHOUT")

        assert table.get("shout") is command
        assert "shout" in table.names()
