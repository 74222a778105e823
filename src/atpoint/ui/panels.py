# atpoint/ui/panels.py
"""panels.py
=========

Prompters that show a composed action menu.

Overview:
---------
The dispatcher does not draw anything itself. It calls a *prompter* with
the active map when a menu opens (or a prefix key descends into a submap),
and a *prompter done* callback when the menu closes. This module provides
two pairs of such callbacks:

- ActionMenuPanel: a non-blocking curses panel docked above the status line,
  laid out in columns like a which-key popup. ``show`` / ``hide`` are the
  prompter pair.
- StatusLinePrompter: a one-line summary written through a host's status
  message setter, for hosts without room for a panel.

The text helpers (`menu_entries`, `format_menu_columns`, `menu_lines`) are
shared with the command-line inspector.
"""

from __future__ import annotations

import curses
from typing import Any, Callable, Optional

from wcwidth import wcswidth, wcwidth

from atpoint.core.ActionMap import BaseActionMap
from atpoint.core.Commands import action_label
from atpoint.utils.logging_config import logger

CursesWindow = Any

COLUMN_GAP = 3


def display_width(text: str) -> int:
    """Terminal cell width of `text`; falls back to len() for control chars."""
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def clip_to_width(text: str, width: int) -> str:
    """Cuts `text` so that it occupies at most `width` terminal cells."""
    if display_width(text) <= width:
        return text
    out: list[str] = []
    used = 0
    for char in text:
        w = max(wcwidth(char), 0)
        if used + w > width:
            break
        out.append(char)
        used += w
    return "".join(out)


def entry_label(entry: Any) -> str:
    """Menu text for one binding: the action label, or ``+name`` for a prefix."""
    if isinstance(entry, BaseActionMap):
        return f"+{entry.name or 'prefix'}"
    return action_label(entry)


def menu_entries(action_map: BaseActionMap) -> list[tuple[str, str]]:
    """Returns ``(trigger, label)`` pairs in display order."""
    return [(trigger, entry_label(entry)) for trigger, entry in action_map.effective_bindings()]


def format_menu_columns(entries: list[tuple[str, str]], width: int) -> list[str]:
    """Lays entries out in as many columns as fit in `width` cells.

    Entries run down the first column, then the next (column-major), with
    triggers right-padded to a common width.
    """
    if not entries:
        return []
    key_width = max(display_width(trigger) for trigger, _ in entries)
    cells = [
        f"{trigger}{' ' * (key_width - display_width(trigger))}  {label}"
        for trigger, label in entries
    ]
    cell_width = max(display_width(cell) for cell in cells)
    columns = max(1, (width + COLUMN_GAP) // (cell_width + COLUMN_GAP))
    rows = -(-len(cells) // columns)

    lines: list[str] = []
    for row in range(rows):
        parts: list[str] = []
        for col in range(columns):
            index = col * rows + row
            if index >= len(cells):
                break
            cell = cells[index]
            pad = cell_width - display_width(cell)
            parts.append(cell + " " * pad)
        lines.append(clip_to_width((" " * COLUMN_GAP).join(parts).rstrip(), width))
    return lines


def menu_lines(action_map: BaseActionMap, indent: int = 0) -> list[str]:
    """Renders a menu as an indented tree, expanding prefix keys."""
    bindings = action_map.effective_bindings()
    if not bindings:
        return []
    key_width = max(display_width(trigger) for trigger, _ in bindings)
    lines: list[str] = []
    for trigger, entry in bindings:
        pad = " " * (key_width - display_width(trigger))
        lines.append(f"{' ' * indent}{trigger}{pad}  {entry_label(entry)}")
        if isinstance(entry, BaseActionMap):
            lines.extend(menu_lines(entry, indent + 2))
    return lines


# ==================== BasePanel Class (Non-Blocking) ====================
class BasePanel:
    """A base class for non-blocking curses panels."""

    def __init__(self, stdscr: CursesWindow, editor: Any = None, **kwargs: Any) -> None:
        """Initialize the base attributes for any panel."""
        self.stdscr: CursesWindow = stdscr
        self.editor = editor
        self.visible: bool = False
        self.term_height, self.term_width = self.stdscr.getmaxyx()
        self.win: Optional[CursesWindow] = None
        logger.debug(f"Base class initialized for panel '{self.__class__.__name__}'.")

    def resize(self) -> None:
        """Recalculates terminal dimensions."""
        self.term_height, self.term_width = self.stdscr.getmaxyx()
        logger.info(
            f"Resize event in panel '{self.__class__.__name__}'. New dims: {self.term_width}x{self.term_height}"
        )

    def open(self) -> None:
        """Make the panel visible."""
        self.visible = True
        logger.info(f"Panel '{self.__class__.__name__}' opened.")

    def close(self) -> None:
        """Hide the panel."""
        self.visible = False
        logger.info(f"Panel '{self.__class__.__name__}' closed.")

    def draw(self) -> None:
        """Draw one frame of the panel's content and chrome."""
        raise NotImplementedError("The 'draw' method must be implemented in a child class.")

    def handle_key(self, key: Any) -> bool:
        """Handles a key directed to the panel.

        Returns:
            True if the panel consumed the key, False otherwise.
        """
        raise NotImplementedError("The 'handle_key' method must be implemented in a child class.")


# ==================== ActionMenuPanel Class ====================
class ActionMenuPanel(BasePanel):
    """Which-key style popup listing the bindings of the active menu.

    Docked to the bottom of the screen, just above the status line. The panel
    only displays; keys are routed to the dispatcher by the host's key binder.

    Attributes:
        title (str): Text centred in the top border.
        entries (list[tuple[str, str]]): Bindings currently shown.
    """

    def __init__(self, stdscr: CursesWindow, editor: Any = None, title: str = "Act", **kwargs: Any) -> None:
        super().__init__(stdscr, editor, **kwargs)
        self.title = title
        self.entries: list[tuple[str, str]] = []
        self.lines: list[str] = []
        self.height = 0
        self._init_colors()

    def _init_colors(self) -> None:
        """Sets up color pairs, degrading to monochrome attributes on failure."""
        try:
            curses.init_pair(211, curses.COLOR_CYAN, curses.COLOR_BLACK)
            curses.init_pair(212, curses.COLOR_WHITE, curses.COLOR_BLACK)
            curses.init_pair(213, curses.COLOR_GREEN, curses.COLOR_BLACK)
            self.attr_title = curses.color_pair(211) | curses.A_BOLD
            self.attr_text = curses.color_pair(212)
            self.attr_border = curses.color_pair(213)
        except curses.error:
            self.attr_title = curses.A_BOLD
            self.attr_text = curses.A_NORMAL
            self.attr_border = curses.A_NORMAL

    # ---------------------- Prompter interface --------------------
    def show(self, action_map: BaseActionMap) -> None:
        """Prompter: displays `action_map`, replacing any previous content."""
        self.entries = menu_entries(action_map)
        if not self.visible:
            self.open()
        self.draw()

    def hide(self) -> None:
        """Prompter done: removes the popup from the screen."""
        if not self.visible:
            return
        self.close()
        if self.win is not None:
            try:
                self.win.erase()
                self.win.noutrefresh()
            except curses.error:
                logger.debug("ActionMenuPanel: erase failed", exc_info=True)
            self.win = None
        self.stdscr.touchwin()
        self.stdscr.refresh()

    # ---------------------- Drawing --------------------
    def _layout(self) -> None:
        self.resize()
        inner_width = max(1, self.term_width - 2)
        self.lines = format_menu_columns(self.entries, inner_width) or ["(nothing to act on)"]
        max_rows = max(1, self.term_height - 3)
        if len(self.lines) > max_rows:
            hidden = len(self.lines) - max_rows + 1
            self.lines = self.lines[: max_rows - 1] + [f"... {hidden} more row(s)"]
        self.height = len(self.lines) + 2

    def draw(self) -> None:
        """Draws the popup: border, title and the laid-out bindings."""
        if not self.visible:
            return
        self._layout()
        start_y = max(0, self.term_height - self.height - 1)
        try:
            self.win = curses.newwin(self.height, self.term_width, start_y, 0)
            self.win.erase()
            self.win.attron(self.attr_border)
            self.win.border()
            self.win.attroff(self.attr_border)
            title = f" {self.title} "
            x = max(1, (self.term_width - display_width(title)) // 2)
            if x + display_width(title) < self.term_width:
                self.win.addstr(0, x, title, self.attr_title)
            for row, line in enumerate(self.lines, start=1):
                self.win.addstr(row, 1, clip_to_width(line, self.term_width - 2), self.attr_text)
            self.win.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logger.warning(f"ActionMenuPanel: could not draw menu ({e}).")

    def handle_key(self, key: Any) -> bool:
        return False


# ==================== StatusLinePrompter Class ====================
class StatusLinePrompter:
    """Shows the active menu as one line through a status message setter.

    Args:
        set_status: Host callback, e.g. the editor's ``_set_status_message``.
        max_width: Cells available on the status line.
    """

    def __init__(self, set_status: Callable[[str], Any], max_width: int = 120) -> None:
        self.set_status = set_status
        self.max_width = max_width

    def show(self, action_map: BaseActionMap) -> None:
        entries = menu_entries(action_map)
        if not entries:
            text = "Nothing to act on at point"
        else:
            text = "  ".join(f"{trigger}:{label}" for trigger, label in entries)
        self.set_status(clip_to_width(text, self.max_width))

    def hide(self) -> None:
        self.set_status("")
