# tests/ui/test_panels.py
"""Tests for the menu prompters and their text layout helpers."""

import curses
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest

from atpoint.core.ActionMap import ActionMap, ComposedMap
from atpoint.core.Commands import Command
from atpoint.ui.panels import (
    ActionMenuPanel,
    BasePanel,
    StatusLinePrompter,
    clip_to_width,
    display_width,
    format_menu_columns,
    menu_entries,
    menu_lines,
)
from tests.stubs import StubHost


@pytest.fixture
def table_map() -> ActionMap:
    return ActionMap(
        "table",
        [
            ("enter", Command("edit_table_cell")),
            ("r k", Command("move_table_row_up")),
            ("w", Command("copy_to_clipboard", label="copy")),
        ],
    )


def test_menu_entries_label_prefixes(table_map: ActionMap) -> None:
    assert menu_entries(table_map) == [
        ("enter", "edit table cell"),
        ("r", "+table r"),
        ("w", "copy"),
    ]


def test_menu_lines_expand_prefixes(table_map: ActionMap) -> None:
    assert menu_lines(table_map) == [
        "enter  edit table cell",
        "r      +table r",
        "  k  move table row up",
        "w      copy",
    ]
    assert menu_lines(ComposedMap([])) == []


class TestFormatMenuColumns:
    entries = [("a", "one"), ("b", "two"), ("c", "three")]

    def test_single_row_when_wide(self) -> None:
        assert format_menu_columns(self.entries, 80) == ["a  one     b  two     c  three"]

    def test_single_column_when_narrow(self) -> None:
        assert format_menu_columns(self.entries, 10) == ["a  one", "b  two", "c  three"]

    def test_column_major_order(self) -> None:
        assert format_menu_columns(self.entries, 22) == ["a  one     c  three", "b  two"]

    def test_lines_are_clipped(self) -> None:
        lines = format_menu_columns([("enter", "a very long label")], 8)
        assert lines == ["enter  a"]

    def test_empty(self) -> None:
        assert format_menu_columns([], 80) == []


def test_wide_characters() -> None:
    assert display_width("日本語") == 6
    assert clip_to_width("日本語", 4) == "日本"
    assert clip_to_width("日本語", 5) == "日本"
    assert clip_to_width("abc", 10) == "abc"


class TestStatusLinePrompter:
    def test_show_and_hide(self, table_map: ActionMap) -> None:
        set_status = MagicMock()
        prompter = StatusLinePrompter(set_status)

        prompter.show(table_map)
        set_status.assert_called_with("enter:edit table cell  r:+table r  w:copy")
        prompter.hide()
        set_status.assert_called_with("")

    def test_empty_menu(self) -> None:
        set_status = MagicMock()
        StatusLinePrompter(set_status).show(ComposedMap([]))
        set_status.assert_called_once_with("Nothing to act on at point")

    def test_clipped_to_width(self, table_map: ActionMap) -> None:
        set_status = MagicMock()
        StatusLinePrompter(set_status, max_width=5).show(table_map)
        set_status.assert_called_once_with("enter")


class TestActionMenuPanel:
    """Drawing with a fully mocked curses module."""

    @pytest.fixture
    def mock_curses(self) -> Iterator[MagicMock]:
        with patch("atpoint.ui.panels.curses") as mocked:
            mocked.error = curses.error
            mocked.color_pair.return_value = 0
            mocked.A_BOLD = 1
            mocked.A_NORMAL = 0
            mocked.newwin.return_value = MagicMock(name="win")
            yield mocked

    def test_show_draws_bindings(self, mock_stdscr: MagicMock, mock_curses: MagicMock, table_map: ActionMap) -> None:
        panel = ActionMenuPanel(mock_stdscr)
        panel.show(table_map)

        assert panel.visible
        assert panel.entries == menu_entries(table_map)
        win = mock_curses.newwin.return_value
        height, width, start_y, start_x = mock_curses.newwin.call_args.args
        assert (width, start_x) == (80, 0)
        assert start_y + height == 23
        drawn = " ".join(str(c.args[2]) for c in win.addstr.call_args_list)
        assert " Act " in drawn
        assert "edit table cell" in drawn
        assert "+table r" in drawn
        mock_curses.doupdate.assert_called_once()

    def test_empty_menu_message(self, mock_stdscr: MagicMock, mock_curses: MagicMock) -> None:
        panel = ActionMenuPanel(mock_stdscr, title="Menu")
        panel.show(ComposedMap([]))

        assert panel.lines == ["(nothing to act on)"]

    def test_hide_erases_window(self, mock_stdscr: MagicMock, mock_curses: MagicMock, table_map: ActionMap) -> None:
        panel = ActionMenuPanel(mock_stdscr)
        panel.show(table_map)
        win = mock_curses.newwin.return_value
        panel.hide()

        assert not panel.visible
        assert panel.win is None
        win.erase.assert_called()
        mock_stdscr.touchwin.assert_called_once()
        mock_stdscr.refresh.assert_called_once()

    def test_hide_when_hidden_is_noop(self, mock_stdscr: MagicMock, mock_curses: MagicMock) -> None:
        ActionMenuPanel(mock_stdscr).hide()
        mock_stdscr.touchwin.assert_not_called()

    def test_draw_error_is_logged(self, mock_stdscr: MagicMock, mock_curses: MagicMock, table_map: ActionMap) -> None:
        mock_curses.newwin.side_effect = curses.error("too small")
        panel = ActionMenuPanel(mock_stdscr)
        panel.show(table_map)

        assert panel.visible
        mock_curses.doupdate.assert_not_called()

    def test_long_menus_are_truncated(self, mock_curses: MagicMock) -> None:
        stdscr = MagicMock()
        stdscr.getmaxyx.return_value = (6, 20)
        amap = ActionMap("many", [(chr(ord("a") + i), Command(f"action_{i}")) for i in range(10)])
        panel = ActionMenuPanel(stdscr)
        panel.show(amap)

        assert len(panel.lines) == 3
        assert panel.lines[-1].startswith("...")

    def test_panel_never_consumes_keys(self, mock_stdscr: MagicMock, mock_curses: MagicMock) -> None:
        assert ActionMenuPanel(mock_stdscr).handle_key(ord("a")) is False


class TestBasePanel:
    def test_state_and_resize(self, mock_stdscr: MagicMock, stub_host: StubHost) -> None:
        panel = BasePanel(mock_stdscr, stub_host)
        assert (panel.editor, panel.visible, panel.win) == (stub_host, False, None)
        assert (panel.term_height, panel.term_width) == (24, 80)

        panel.open()
        assert panel.visible
        panel.close()
        assert not panel.visible

        mock_stdscr.getmaxyx.return_value = (40, 120)
        panel.resize()
        assert (panel.term_height, panel.term_width) == (40, 120)

    @pytest.mark.parametrize(("method", "args"), [("draw", ()), ("handle_key", (ord("a"),))])
    def test_abstract_methods(self, mock_stdscr: MagicMock, method: str, args: tuple) -> None:
        with pytest.raises(NotImplementedError, match=method):
            getattr(BasePanel(mock_stdscr), method)(*args)
