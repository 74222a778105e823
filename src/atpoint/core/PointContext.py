# atpoint/core/PointContext.py
"""PointContext.py
==================
Read-only view of the editor state that detectors probe.

Description:
-----------------------
Detectors never talk to the editor directly. Each dispatch takes one
`PointContext` snapshot of the buffer (lines, cursor, selection, filename)
and hands it to every detector. Backend questions that only the host can
answer (diagnostics, cross references, the symbol table) are supplied as
named probes: plain callables that receive the context and must not change
editor state.

The attribute names read by `from_editor()` (`text`, `cursor_y`, `cursor_x`,
`is_selecting`, `selection_start`, `selection_end`, `filename`) are those of
a curses editor buffer; any object exposing them can be used as a host.

Recognised probe names:
    - ``diagnostic_at_point``: returns the diagnostic under point or None.
    - ``xref_at_point``: returns a cross-reference location or None.
    - ``symbol_kind``: called with an identifier, returns ``"function"``,
      ``"variable"`` or None.
    - ``table_cell`` / ``heading``: override the built-in text checks.
"""

import os
import re
from typing import Any, Callable, Optional

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.token import Token
from pygments.util import ClassNotFound

from atpoint.utils.logging_config import logger

Probe = Callable[..., Any]

# Modes pygments does not know about, by file extension.
MODE_BY_EXTENSION: dict[str, str] = {
    ".org": "org",
    ".md": "markdown",
    ".markdown": "markdown",
    ".txt": "text",
}


## ==================== PointContext Class ====================
class PointContext:
    """Snapshot of the buffer around point.

    Attributes:
        text (list[str]): Buffer lines.
        cursor_y (int): Zero-based line of point.
        cursor_x (int): Zero-based column of point.
        is_selecting (bool): Whether a selection is active.
        selection_start / selection_end: (row, col) pairs or None.
        filename (Optional[str]): Path of the buffer's file, if any.
        probes (dict[str, Probe]): Host supplied probes.
    """

    def __init__(
        self,
        text: list[str],
        cursor_y: int = 0,
        cursor_x: int = 0,
        is_selecting: bool = False,
        selection_start: Optional[tuple[int, int]] = None,
        selection_end: Optional[tuple[int, int]] = None,
        filename: Optional[str] = None,
        mode: Optional[str] = None,
        probes: Optional[dict[str, Probe]] = None,
    ) -> None:
        self.text = list(text) if text else [""]
        self.cursor_y = min(max(cursor_y, 0), len(self.text) - 1)
        self.cursor_x = min(max(cursor_x, 0), len(self.text[self.cursor_y]))
        self.is_selecting = is_selecting
        self.selection_start = selection_start
        self.selection_end = selection_end
        self.filename = filename
        self.probes: dict[str, Probe] = dict(probes or {})
        self._mode = mode
        self._lexer: Optional[Lexer] = None
        self._lexer_resolved = False
        self._identifier: Any = None
        self._identifier_resolved = False

    @classmethod
    def from_editor(
        cls, editor: Any, probes: Optional[dict[str, Probe]] = None
    ) -> "PointContext":
        """Builds a context from an editor exposing buffer attributes.

        Probes found on ``editor.atpoint_probes`` are used first; explicit
        `probes` override them.
        """
        merged: dict[str, Probe] = dict(getattr(editor, "atpoint_probes", None) or {})
        merged.update(probes or {})
        return cls(
            text=getattr(editor, "text", [""]),
            cursor_y=getattr(editor, "cursor_y", 0),
            cursor_x=getattr(editor, "cursor_x", 0),
            is_selecting=bool(getattr(editor, "is_selecting", False)),
            selection_start=getattr(editor, "selection_start", None),
            selection_end=getattr(editor, "selection_end", None),
            filename=getattr(editor, "filename", None),
            mode=getattr(editor, "major_mode", None),
            probes=merged,
        )

    # ---------------------- Buffer state --------------------
    @property
    def line(self) -> str:
        return self.text[self.cursor_y]

    @property
    def buffer_dir(self) -> str:
        if self.filename:
            return os.path.dirname(os.path.abspath(self.filename))
        return os.getcwd()

    def _normalized_selection(self) -> Optional[tuple[tuple[int, int], tuple[int, int]]]:
        if not self.is_selecting or self.selection_start is None or self.selection_end is None:
            return None
        start, end = sorted([tuple(self.selection_start), tuple(self.selection_end)])
        if start == end:
            return None
        return start, end  # type: ignore[return-value]

    @property
    def has_selection(self) -> bool:
        return self._normalized_selection() is not None

    @property
    def selected_text(self) -> str:
        """Text of the active selection, or an empty string.

        Detectors never read it: a region target carries no value. It is
        provided for hosts and for host commands bound in the ``region`` map
        that want the selected text without re-reading the buffer.
        """
        norm = self._normalized_selection()
        if norm is None:
            return ""
        (start_row, start_col), (end_row, end_col) = norm
        if start_row == end_row:
            return self.text[start_row][start_col:end_col]
        parts = [self.text[start_row][start_col:]]
        parts.extend(self.text[start_row + 1 : end_row])
        parts.append(self.text[end_row][:end_col])
        return "\n".join(parts)

    def match_at_point(self, pattern: re.Pattern[str]) -> Optional[re.Match[str]]:
        """Returns the match of `pattern` on the current line that covers point.

        Point right after the last character of a match still counts.
        """
        x = self.cursor_x
        for match in pattern.finditer(self.line):
            if match.start() <= x <= match.end():
                return match
            if match.start() > x:
                break
        return None

    # ---------------------- Mode and lexing --------------------
    @property
    def lexer(self) -> Optional[Lexer]:
        if not self._lexer_resolved:
            self._lexer_resolved = True
            if self.filename:
                try:
                    self._lexer = get_lexer_for_filename(self.filename)
                except ClassNotFound:
                    self._lexer = None
        return self._lexer

    @property
    def mode(self) -> str:
        """The buffer mode: explicit, from the file extension, or from pygments."""
        if self._mode is None:
            ext = os.path.splitext(self.filename or "")[1].lower()
            if ext in MODE_BY_EXTENSION:
                self._mode = MODE_BY_EXTENSION[ext]
            elif self.lexer is not None and self.lexer.aliases:
                self._mode = self.lexer.aliases[0]
            else:
                self._mode = "text"
        return self._mode

    def identifier_at_point(self) -> Optional[str]:
        """Returns the name token under point, lexed with the buffer's lexer.

        Only the current line is lexed. Returns None when the buffer has no
        lexer or point is not on a `Token.Name` token.
        """
        if self._identifier_resolved:
            return self._identifier
        self._identifier_resolved = True
        lexer = self.lexer
        if lexer is None or not self.line.strip():
            return None

        x = self.cursor_x
        ending_at_point: Optional[str] = None
        for index, ttype, value in lexer.get_tokens_unprocessed(self.line):
            end = index + len(value)
            if ttype not in Token.Name or not value.strip():
                if index > x:
                    break
                continue
            if index <= x < end:
                self._identifier = value
                return value
            if end == x:
                ending_at_point = value
            elif index > x:
                break
        self._identifier = ending_at_point
        return ending_at_point

    # ---------------------- Host probes --------------------
    def has_probe(self, name: str) -> bool:
        return callable(self.probes.get(name))

    def probe(self, name: str, *args: Any) -> Any:
        """Calls the host probe `name` with this context and `args`."""
        func = self.probes.get(name)
        if not callable(func):
            return None
        result = func(self, *args)
        logger.debug("Probe %r returned %r.", name, result)
        return result

    def __repr__(self) -> str:
        return (
            f"PointContext({self.filename!r}, line={self.cursor_y + 1}, "
            f"col={self.cursor_x + 1}, mode={self._mode!r})"
        )
