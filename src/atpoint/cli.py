# atpoint/cli.py
"""
atpoint command-line inspector
==============================

Shows what atpoint would offer at a position in a file:

    atpoint FILE[:LINE[:COL]]          list detected targets and the menu
    atpoint --menu FILE[:LINE[:COL]]   open the menu in the terminal and
                                       report the command a key would run

LINE and COL are 1-based. The file is decoded with chardet's guess. The plain
report runs without a host, so nothing is executed. In ``--menu`` mode
commands are bound to a dry-run host that records calls instead of
performing them.

Exit status: 0 on success, 1 if the file cannot be read, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import curses
import locale
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from atpoint.core.Composer import ComposedMenu
from atpoint.core.Dispatcher import Dispatcher, create_dispatcher
from atpoint.core.PointContext import PointContext
from atpoint.ui.KeyBinder import KeyBinder
from atpoint.ui.panels import ActionMenuPanel, menu_lines
from atpoint.utils.logging_config import setup_logging
from atpoint.utils.utils import deep_merge, load_config, read_text_file

logger = logging.getLogger("atpoint")

LOCATION_RE = re.compile(r"^(?P<path>.+?)(?::(?P<line>\d+))?(?::(?P<col>\d+))?$")


def parse_location(spec: str) -> tuple[str, int, int]:
    """Splits ``FILE[:LINE[:COL]]`` into (path, line, col), 1-based.

    Raises:
        ValueError: If the path is empty or a position is zero.
    """
    match = LOCATION_RE.match(spec.strip())
    if not match:
        raise ValueError(f"invalid location: {spec!r}")
    line = int(match.group("line") or 1)
    col = int(match.group("col") or 1)
    if line < 1 or col < 1:
        raise ValueError(f"line and column are 1-based: {spec!r}")
    return match.group("path"), line, col


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atpoint",
        description="Show the actions atpoint offers at a position in a file.",
    )
    parser.add_argument("location", help="FILE[:LINE[:COL]], 1-based")
    parser.add_argument("--config", metavar="PATH", help="configuration file (TOML)")
    parser.add_argument(
        "--menu", action="store_true", help="open the menu interactively (dry run)"
    )
    return parser


class DryRunHost:
    """Host whose every command records its call instead of running."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, name: str) -> Callable[..., bool]:
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args: Any) -> bool:
            self.calls.append((name, args))
            return True

        record.__name__ = name
        return record


def format_report(location: str, context: PointContext, menu: ComposedMenu, encoding: str) -> list[str]:
    """Builds the text report for a composed menu."""
    lines = [f"{location} (mode: {context.mode}, encoding: {encoding})"]
    if menu.is_empty:
        lines.append("Targets: none")
        lines.append("Menu: (empty)")
        return lines

    lines.append("Targets:")
    for index, target in enumerate(menu.targets, start=1):
        value = "" if not target.has_value else f"  {target.value!r}"
        lines.append(f"  {index}. {target.kind.value}{value}")
    lines.append("Menu:")
    lines.extend(f"  {line}" for line in menu_lines(menu.raw_map))
    return lines


def _run_menu(stdscr: Any, dispatcher: Dispatcher) -> None:
    """curses.wrapper target: shows the menu and feeds it keys until it closes."""
    try:
        curses.set_escdelay(25)
    except (AttributeError, curses.error):
        os.environ.setdefault("ESCDELAY", "25")

    panel = ActionMenuPanel(stdscr, title="atpoint")
    dispatcher.configure(prompter=panel.show, prompter_done=panel.hide)
    binder = KeyBinder(dispatcher, stdscr)
    dispatcher.run_interactive(binder.read_trigger)


def run_menu(config: dict[str, Any], context: PointContext) -> int:
    """Runs the interactive dry run and prints the recorded command calls."""
    host = DryRunHost()
    config = deep_merge(config, {"editor": {"use_system_clipboard": False}})
    dispatcher = create_dispatcher(host, config, context_provider=lambda: context)

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    curses.wrapper(_run_menu, dispatcher)

    if not host.calls:
        copied = dispatcher.commands.clipboard.internal if dispatcher.commands else ""
        print(f"copy_to_clipboard({copied!r})" if copied else "No command selected.")
        return 0
    for name, args in host.calls:
        print(f"{name}({', '.join(repr(a) for a in args)})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point. Returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        path, line, col = parse_location(args.location)
    except ValueError as e:
        parser.error(str(e))

    config = load_config(args.config)
    setup_logging(config)

    try:
        text, encoding = read_text_file(path)
    except OSError as e:
        logger.error("Cannot read %r: %s", path, e)
        print(f"atpoint: cannot read {path}: {e}", file=sys.stderr)
        return 1

    if line > len(text):
        logger.warning("Line %d is past the end of %r; using the last line.", line, path)
    context = PointContext(text, line - 1, col - 1, filename=str(Path(path)))

    if args.menu:
        return run_menu(config, context)

    dispatcher = create_dispatcher(None, config, context_provider=lambda: context)
    menu = dispatcher.compose()
    print("\n".join(format_report(args.location, context, menu, encoding)))
    return 0


def start() -> None:
    """Console script entry point."""
    sys.exit(main())

