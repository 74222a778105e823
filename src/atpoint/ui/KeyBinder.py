# atpoint/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
Connects a curses input loop to the atpoint dispatcher.

Terminal input arrives as curses key codes, single characters, or escape
sequences. This module turns each of them into a canonical trigger (see
`atpoint.core.Triggers`) and routes it:

- while a menu is open, every trigger goes to `Dispatcher.handle_key`;
- otherwise the configured act key opens the menu and the act-default key
  runs the default action;
- anything else is left to the host.

Key Features:
- Robust ESC parsing: lone ESC, Alt chords (ESC + char) and CSI/SS3 sequences.
- Printable detection with wcwidth, so wide characters are valid triggers.

Intended Usage:
---------------
Create a `KeyBinder(dispatcher, stdscr)` and call `handle_input(key)` from
the host's main loop before its own key handling. A False return means the
key was not consumed.
"""

import curses
import logging
import re
from typing import Any, Optional

from wcwidth import wcswidth

from atpoint.core.Dispatcher import Dispatcher
from atpoint.core.Triggers import normalize_trigger
from atpoint.utils.logging_config import TRIGGER_LOGGER

# Normalized escape sequences. Keys do NOT include the leading ESC (0x1B),
# because get_key_input() reads what follows it.
ESCAPE_SEQUENCE_MAP: dict[str, str] = {
    # Arrows (CSI and SS3)
    "[A": "up", "[B": "down", "[C": "right", "[D": "left",
    "OA": "up", "OB": "down", "OC": "right", "OD": "left",

    # xterm modifiers: ;2=Shift, ;3=Alt, ;4=Shift+Alt, ;5=Ctrl,
    # ;6=Shift+Ctrl, ;7=Alt+Ctrl, ;8=Shift+Alt+Ctrl
    "[1;2A": "shift+up", "[1;2B": "shift+down",
    "[1;2C": "shift+right", "[1;2D": "shift+left",

    "[1;3A": "alt+up", "[1;3B": "alt+down",
    "[1;3C": "alt+right", "[1;3D": "alt+left",

    "[1;5A": "ctrl+up", "[1;5B": "ctrl+down",
    "[1;5C": "ctrl+right", "[1;5D": "ctrl+left",

    "[1;6A": "shift+ctrl+up", "[1;6B": "shift+ctrl+down",
    "[1;6C": "shift+ctrl+right", "[1;6D": "shift+ctrl+left",

    "[1;7A": "alt+ctrl+up", "[1;7B": "alt+ctrl+down",
    "[1;7C": "alt+ctrl+right", "[1;7D": "alt+ctrl+left",

    # Home/End, Insert/Delete/PageUp/PageDown
    "[H": "home", "[F": "end", "OH": "home", "OF": "end",
    "[1~": "home", "[4~": "end",
    "[2~": "insert", "[3~": "delete", "[5~": "pageup", "[6~": "pagedown",

    # Shift+Tab
    "[Z": "shift+tab",

    # Function keys (SS3 and tilde variants)
    "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
    "[11~": "f1", "[12~": "f2", "[13~": "f3", "[14~": "f4",
    "[15~": "f5", "[17~": "f6", "[18~": "f7", "[19~": "f8",
    "[20~": "f9", "[21~": "f10", "[23~": "f11", "[24~": "f12",
}


def _build_code_map() -> dict[int, str]:
    """Maps control codes and curses key constants to trigger names."""
    codes: dict[int, str] = {}
    for code in range(1, 27):
        codes[code] = f"ctrl+{chr(ord('a') + code - 1)}"
    codes.update({9: "tab", 10: "enter", 13: "enter", 27: "esc", 8: "backspace", 127: "backspace", 32: "space"})

    named = {
        "KEY_ENTER": "enter",
        "KEY_BACKSPACE": "backspace",
        "KEY_UP": "up",
        "KEY_DOWN": "down",
        "KEY_LEFT": "left",
        "KEY_RIGHT": "right",
        "KEY_HOME": "home",
        "KEY_END": "end",
        "KEY_PPAGE": "pageup",
        "KEY_NPAGE": "pagedown",
        "KEY_DC": "delete",
        "KEY_IC": "insert",
        "KEY_BTAB": "shift+tab",
        "KEY_SR": "shift+up",
        "KEY_SF": "shift+down",
        "KEY_SLEFT": "shift+left",
        "KEY_SRIGHT": "shift+right",
    }
    for attr, trigger in named.items():
        code = getattr(curses, attr, None)
        if isinstance(code, int):
            codes[code] = trigger
    for n in range(1, 13):
        code = getattr(curses, f"KEY_F{n}", None)
        if isinstance(code, int):
            codes[code] = f"f{n}"
    return codes


KEY_CODE_TRIGGERS: dict[int, str] = _build_code_map()


def trigger_from_key(key: Any) -> Optional[str]:
    """Converts a key as read from curses into a canonical trigger.

    Args:
        key: An integer key code, a single character, or a key string
            such as ``"alt-x"`` or ``"shift+up"``.

    Returns:
        The canonical trigger, or None for keys that cannot be triggers
        (unknown codes, invisible characters, read errors).
    """
    if isinstance(key, int):
        if key in KEY_CODE_TRIGGERS:
            return KEY_CODE_TRIGGERS[key]
        if 32 < key < 0x110000:
            char = chr(key)
            return char if wcswidth(char) > 0 else None
        return None

    if not isinstance(key, str) or not key:
        return None
    if len(key) == 1:
        if ord(key) in KEY_CODE_TRIGGERS:
            return KEY_CODE_TRIGGERS[ord(key)]
        return key if wcswidth(key) > 0 else None
    try:
        return normalize_trigger(key)
    except ValueError:
        logging.debug("trigger_from_key: %r is not a valid trigger", key)
        return None


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Routes terminal keys to a `Dispatcher`.

    Attributes:
        dispatcher (Dispatcher): The dispatcher receiving triggers.
        stdscr: The curses window keys are read from.
        act_key (str): Trigger that opens the menu.
        act_default_key (str): Trigger that runs the default action.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        stdscr: Any = None,
        act_key: str = "alt-.",
        act_default_key: str = "alt-;",
    ) -> None:
        self.dispatcher = dispatcher
        self.stdscr = stdscr
        self.act_key = normalize_trigger(act_key)
        self.act_default_key = normalize_trigger(act_default_key)
        logging.debug(
            "KeyBinder initialized: act=%r, act_default=%r", self.act_key, self.act_default_key
        )

    def handle_input(self, key: Any) -> bool:
        """Processes one key from the host's input loop.

        Returns:
            bool: True if atpoint consumed the key, False if the host should
            handle it.
        """
        trigger = trigger_from_key(key)
        TRIGGER_LOGGER.debug("key %r -> trigger %r", key, trigger)

        if self.dispatcher.capturing:
            if trigger is None:
                self.dispatcher.cancel()
                return False
            return self.dispatcher.handle_key(trigger)

        if trigger is None:
            return False
        if trigger == self.act_key:
            self.dispatcher.act()
            return True
        if trigger == self.act_default_key:
            self.dispatcher.act_default()
            return True
        return False

    def get_key_input(self, window: Any = None) -> int | str:
        """Reads a single key or key sequence with ESC parsing.

        Returns:
            int | str:
            - the curses key code for plain keys,
            - ``"alt-<char>"`` for Alt/Meta chords,
            - the trigger name for a known escape sequence,
            - 27 for a lone ESC or an unknown sequence,
            - curses.ERR for curses errors.
        """
        target = window or self.stdscr
        try:
            ch = target.getch()
            if ch != 27:
                return ch

            seq = ""
            target.nodelay(True)
            try:
                while True:
                    nx = target.getch()
                    if nx == curses.ERR:
                        break
                    if 0 <= nx <= 255:
                        seq += chr(nx)
                    else:
                        seq += f"<{nx}>"
            finally:
                target.nodelay(False)

            if not seq:
                logging.debug("get_key_input: standalone ESC")
                return 27
            if seq[0] == "\x1b":
                seq = seq[1:]

            if len(seq) == 1 and seq.isprintable():
                alt_key = f"alt-{seq}"
                logging.debug("get_key_input: Alt chord -> %r", alt_key)
                return alt_key

            mapped = ESCAPE_SEQUENCE_MAP.get(seq)
            if not mapped:
                cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
                mapped = ESCAPE_SEQUENCE_MAP.get(cleaned)
            if mapped:
                logging.debug("get_key_input: ESC %r -> %r", seq, mapped)
                return mapped

            logging.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
            return 27
        except curses.error:
            return curses.ERR

    def read_trigger(self, window: Any = None) -> Optional[str]:
        """Reads keys until one maps to a trigger. Returns None on a read error."""
        while True:
            key = self.get_key_input(window)
            if key == curses.ERR:
                return None
            trigger = trigger_from_key(key)
            if trigger is not None:
                return trigger
