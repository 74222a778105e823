# atpoint/core/Triggers.py
"""Triggers.py
==================
Canonical names for the input gestures that select an action in a menu.

A trigger is a plain string. Action maps store triggers in canonical form so
that `"RET"`, `"return"` and `"enter"` all name the same binding, and so that
`"Ctrl+Alt+X"` and `"alt-ctrl+x"` collide as they should.

Canonical form:
- Single printable characters keep their case: `"w"` and `"W"` differ.
- Named keys are lowercase (`"enter"`, `"tab"`, `"up"`, `"f5"`, ...).
- Ctrl/Shift chords are joined with `+` in the order `ctrl`, `shift`.
- Alt chords use the `alt-` prefix produced by the terminal key reader,
  e.g. `"alt-x"`, `"alt-ctrl+x"`.
"""

from typing import Iterable, Union

# Named keys understood in key specifications.
NAMED_KEYS: frozenset[str] = frozenset(
    {
        "enter", "tab", "esc", "space", "backspace", "delete", "insert",
        "home", "end", "pageup", "pagedown", "up", "down", "left", "right",
        *(f"f{i}" for i in range(1, 13)),
    }
)

KEY_ALIASES: dict[str, str] = {
    "ret": "enter",
    "return": "enter",
    "escape": "esc",
    "spc": "space",
    "del": "delete",
    "ins": "insert",
    "pgup": "pageup",
    "pgdn": "pagedown",
    "bs": "backspace",
}

MODIFIER_ALIASES: dict[str, str] = {
    "ctrl": "ctrl",
    "control": "ctrl",
    "c": "ctrl",
    "shift": "shift",
    "s": "shift",
    "alt": "alt",
    "meta": "alt",
    "m": "alt",
}

# Modifiers other than alt, in canonical order.
_MODIFIER_ORDER = ("ctrl", "shift")

TriggerSpec = Union[str, Iterable[str]]


def _split_chord(spec: str) -> tuple[list[str], str]:
    """Splits `"ctrl+shift+x"` into (["ctrl", "shift"], "x"); handles a literal `+` key."""
    if spec.endswith("++"):
        head = spec[:-2]
        return (head.split("+") if head else []), "+"
    parts = spec.split("+")
    return parts[:-1], parts[-1]


def normalize_trigger(spec: str) -> str:
    """Returns the canonical form of a single key specification.

    Args:
        spec: A key specification such as `"w"`, `"RET"`, `"ctrl+x"`,
            `"alt-x"` or `"Alt+Ctrl+X"`.

    Returns:
        str: The canonical trigger name.

    Raises:
        ValueError: If the specification is empty, uses an unknown modifier
            or names an unknown key.
    """
    if not isinstance(spec, str):
        raise ValueError(f"Invalid trigger type: {type(spec).__name__}. Expected str.")
    if spec == " ":
        return "space"

    s = spec.strip()
    if not s:
        raise ValueError("Trigger specification cannot be empty.")
    if len(s) == 1:
        return s

    modifiers: set[str] = set()
    lowered = s.lower()
    if lowered.startswith("alt-") and len(s) > 4:
        modifiers.add("alt")
        s = s[4:]

    raw_mods, base = _split_chord(s) if len(s) > 1 else ([], s)
    for raw in raw_mods:
        mod = MODIFIER_ALIASES.get(raw.strip().lower())
        if mod is None:
            raise ValueError(f"Unknown modifier {raw!r} in trigger {spec!r}")
        modifiers.add(mod)

    base = base.strip()
    if not base:
        raise ValueError(f"Missing base key in trigger {spec!r}")

    if len(base) == 1:
        if "shift" in modifiers and base.isalpha():
            # shift+a is just "A"
            modifiers.discard("shift")
            base = base.upper()
        elif "ctrl" in modifiers and base.isalpha():
            base = base.lower()
    else:
        base = base.lower()
        base = KEY_ALIASES.get(base, base)
        if base not in NAMED_KEYS:
            raise ValueError(f"Unknown key {base!r} in trigger {spec!r}")

    others = [m for m in _MODIFIER_ORDER if m in modifiers]
    chord = "+".join([*others, base])
    if "alt" in modifiers:
        return f"alt-{chord}"
    return chord


def parse_sequence(spec: TriggerSpec) -> tuple[str, ...]:
    """Parses a key sequence into a tuple of canonical triggers.

    A string is split on whitespace (`"r k"` is the two-key sequence `r`
    then `k`); any other iterable is taken element by element.

    Raises:
        ValueError: If the sequence is empty or any element is invalid.
    """
    if isinstance(spec, str):
        keys = ["space"] if spec == " " else spec.split()
    else:
        keys = list(spec)
    if not keys:
        raise ValueError("Key sequence cannot be empty.")
    return tuple(normalize_trigger(k) for k in keys)
