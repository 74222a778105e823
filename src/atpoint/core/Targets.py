# atpoint/core/Targets.py
"""Targets.py
==================
Target kinds and the `Target` value produced by a detector.

A target pairs the action map relevant to the object at point with the value
that should be handed to every action in that map. The `NO_VALUE` sentinel
means the actions act on point directly and take no argument.
"""

from enum import Enum
from typing import Any


class TargetKind(Enum):
    """The kinds of object a detector can find at point."""

    REGION = "region"
    URL = "url"
    EMAIL = "email"
    FILE = "file"
    TIMESTAMP = "timestamp"
    TABLE_CELL = "table_cell"
    HEADING = "heading"
    DIAGNOSTIC = "diagnostic"
    XREF = "xref"
    FUNCTION = "function"
    VARIABLE = "variable"
    IDENTIFIER = "identifier"


class _NoValue:
    """Type of the `NO_VALUE` sentinel."""

    _instance = None

    def __new__(cls) -> "_NoValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


## ==================== Target Class ====================
class Target:
    """An object detected at point.

    Attributes:
        kind (TargetKind): What was detected.
        map: The action map for this kind, either an action map instance or a
            `MapRef` naming one in the map registry.
        value: The value bound into each action, or `NO_VALUE`.
    """

    __slots__ = ("kind", "map", "value")

    def __init__(self, kind: TargetKind, action_map: Any, value: Any = NO_VALUE) -> None:
        self.kind = kind
        self.map = action_map
        self.value = value

    @property
    def has_value(self) -> bool:
        return self.value is not NO_VALUE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Target):
            return NotImplemented
        return (
            self.kind is other.kind
            and self.map == other.map
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.map))

    def __repr__(self) -> str:
        return f"Target({self.kind.value}, map={self.map!r}, value={self.value!r})"
