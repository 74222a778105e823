# tests/test_core/test_point_context.py
"""Unit tests for `PointContext`: buffer snapshot, mode, lexing and probes."""

import re
from typing import Any, Callable
from unittest.mock import MagicMock

from atpoint.core.Detectors import probe_region
from atpoint.core.PointContext import PointContext
from atpoint.core.Targets import NO_VALUE
from tests.stubs import StubHost


def test_cursor_is_clamped() -> None:
    ctx = PointContext(["abc", "de"], cursor_y=10, cursor_x=10)
    assert (ctx.cursor_y, ctx.cursor_x) == (1, 2)
    assert ctx.line == "de"

    empty = PointContext([], cursor_y=-1, cursor_x=-1)
    assert empty.text == [""]
    assert (empty.cursor_y, empty.cursor_x) == (0, 0)


def test_selected_text_single_and_multi_line() -> None:
    """Selections are normalized, so a reversed selection reads the same."""
    text = ["hello world", "second line", "third"]
    single = PointContext(text, is_selecting=True, selection_start=(0, 6), selection_end=(0, 11))
    multi = PointContext(text, is_selecting=True, selection_start=(2, 3), selection_end=(0, 6))

    assert single.has_selection
    assert single.selected_text == "world"
    assert multi.selected_text == "world\nsecond line\nthi"


def test_empty_or_inactive_selection() -> None:
    text = ["hello"]
    collapsed = PointContext(text, is_selecting=True, selection_start=(0, 2), selection_end=(0, 2))
    inactive = PointContext(text, is_selecting=False, selection_start=(0, 0), selection_end=(0, 3))

    assert not collapsed.has_selection
    assert not inactive.has_selection
    assert inactive.selected_text == ""


def test_region_text_is_read_from_the_context() -> None:
    """A region target has no value; region commands read the selection here."""
    ctx = PointContext(["hello world"], is_selecting=True, selection_start=(0, 0), selection_end=(0, 5))

    assert probe_region(ctx) is NO_VALUE
    assert ctx.selected_text == "hello"


def test_match_at_point_includes_end_of_match(make_context: Callable[..., PointContext]) -> None:
    pattern = re.compile(r"\d+")
    assert make_context("ab 123 cd", x=6).match_at_point(pattern).group(0) == "123"
    assert make_context("ab 123 cd", x=3).match_at_point(pattern).group(0) == "123"
    assert make_context("ab 123 cd", x=1).match_at_point(pattern) is None


def test_mode_detection(make_context: Callable[..., PointContext]) -> None:
    """Explicit mode wins, then known extensions, then pygments, then "text"."""
    assert make_context("x", filename="notes.org").mode == "org"
    assert make_context("x", filename="README.md").mode == "markdown"
    assert make_context("x", filename="script.py").mode == "python"
    assert make_context("x", filename="script.py", mode="org").mode == "org"
    assert make_context("x").mode == "text"
    assert make_context("x", filename="data.unknownext").mode == "text"


def test_lexer_is_none_for_unknown_files(make_context: Callable[..., PointContext]) -> None:
    assert make_context("x", filename="data.unknownext").lexer is None
    assert make_context("x").lexer is None


def test_identifier_at_point(make_context: Callable[..., PointContext]) -> None:
    line = "result = compute_total(items)"
    assert make_context(line, x=12, filename="a.py").identifier_at_point() == "compute_total"
    # Point just after an identifier still counts.
    assert make_context(line, x=6, filename="a.py").identifier_at_point() == "result"
    # On an operator there is no identifier.
    assert make_context(line, x=7, filename="a.py").identifier_at_point() is None
    # No lexer, no identifier.
    assert make_context(line, x=12).identifier_at_point() is None


def test_probes_receive_context_and_arguments(make_context: Callable[..., PointContext]) -> None:
    symbol_kind = MagicMock(return_value="function")
    ctx = make_context("main()", probes={"symbol_kind": symbol_kind})

    assert ctx.has_probe("symbol_kind")
    assert not ctx.has_probe("diagnostic_at_point")
    assert ctx.probe("symbol_kind", "main") == "function"
    symbol_kind.assert_called_once_with(ctx, "main")
    assert ctx.probe("diagnostic_at_point") is None


def test_from_editor_reads_host_attributes() -> None:
    """Host probes are merged with explicit probes; explicit ones win."""
    host = StubHost(["first", "second line"], cursor_y=1, cursor_x=3, filename="notes.org")
    host.select((1, 0), (1, 6))
    host_probe = MagicMock(return_value="host")
    explicit = MagicMock(return_value="explicit")
    host.atpoint_probes = {"xref_at_point": host_probe, "diagnostic_at_point": host_probe}

    ctx = PointContext.from_editor(host, {"xref_at_point": explicit})

    assert ctx.line == "second line"
    assert ctx.cursor_x == 3
    assert ctx.selected_text == "second"
    assert ctx.mode == "org"
    assert ctx.probe("xref_at_point") == "explicit"
    assert ctx.probe("diagnostic_at_point") == "host"


def test_from_editor_major_mode() -> None:
    host: Any = StubHost(["x"], filename="a.py")
    host.major_mode = "markdown"
    assert PointContext.from_editor(host).mode == "markdown"
