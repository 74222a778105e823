# atpoint/core/ActionMap.py
"""ActionMap.py
==================
Description:
-----------------------
Nested, ordered tables mapping triggers to actions, and their ordered
composition.

An `ActionMap` binds canonical triggers (see `atpoint.core.Triggers`) to an
action reference, a nested `ActionMap` (a prefix key), or a `MapRef` naming a
map held by a `MapRegistry`. A map may have one parent that supplies fallback
bindings. Maps are built once at startup and read on every dispatch.

`compose_ordered()` merges several maps into a `ComposedMap` where the earlier
map shadows the later ones on a trigger collision. Prefix keys present in
more than one constituent are merged the same way, one level at a time.

Key Features:
- Insertion order is display order.
- Multi-key sequences (`"r k"` or `("r", "k")`) create intermediate submaps.
- Cycles are rejected when they are defined, not when they are dispatched.
- `effective_bindings()` resolves the parent chain into one flat table.
"""

from typing import Any, Iterable, Iterator, Optional, Union

from atpoint.core.Triggers import TriggerSpec, normalize_trigger, parse_sequence
from atpoint.utils.logging_config import logger


class ActionMapError(ValueError):
    """A malformed action map: a cycle, a dangling reference or a bad leaf."""


## ==================== MapRef Class ====================
class MapRef:
    """A named reference to a map held by a `MapRegistry`.

    Lets several detectors or prefix keys share one map definition without
    copying it. Resolved once, during transform or compose.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MapRef) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("MapRef", self.name))

    def __repr__(self) -> str:
        return f"MapRef({self.name!r})"


## ==================== BaseActionMap Class ====================
class BaseActionMap:
    """Read interface shared by `ActionMap` and `ComposedMap`."""

    name: Optional[str] = None

    def lookup(self, trigger: str) -> Any:
        raise NotImplementedError("The 'lookup' method must be implemented in a child class.")

    def effective_bindings(self) -> list[tuple[str, Any]]:
        raise NotImplementedError(
            "The 'effective_bindings' method must be implemented in a child class."
        )

    def lookup_sequence(self, triggers: TriggerSpec) -> Any:
        """Walks nested maps key by key. Returns None when any step misses."""
        try:
            keys = parse_sequence(triggers)
        except ValueError:
            return None
        entry: Any = self
        for key in keys:
            if not isinstance(entry, BaseActionMap):
                return None
            entry = entry.lookup(key)
            if entry is None:
                return None
        return entry

    def items(self) -> list[tuple[str, Any]]:
        return self.effective_bindings()

    def __contains__(self, trigger: object) -> bool:
        return isinstance(trigger, str) and self.lookup(trigger) is not None

    def __iter__(self) -> Iterator[str]:
        return iter([key for key, _ in self.effective_bindings()])

    def __len__(self) -> int:
        return len(self.effective_bindings())


MapEntry = Union[Any, "ActionMap", MapRef]


## ==================== ActionMap Class ====================
class ActionMap(BaseActionMap):
    """An ordered trigger table with an optional parent.

    Attributes:
        name (Optional[str]): Display name, used for prefix labels and logs.
        parent (Optional[ActionMap]): Map consulted when a trigger is not
            bound locally.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        bindings: Optional[Iterable[tuple[TriggerSpec, MapEntry]]] = None,
        parent: Optional["ActionMap"] = None,
    ) -> None:
        self.name = name
        self._bindings: dict[str, MapEntry] = {}
        self._parent: Optional[ActionMap] = None
        if parent is not None:
            self.set_parent(parent)
        for trigger, entry in bindings or ():
            self.define(trigger, entry)

    # ---------------------- Definition --------------------
    def define(self, trigger: TriggerSpec, entry: MapEntry) -> None:
        """Binds `trigger` (a key or a key sequence) to `entry`.

        Args:
            trigger: A key specification or a sequence of them.
            entry: A callable action reference, an `ActionMap` or a `MapRef`.

        Raises:
            ValueError: If the trigger specification is invalid.
            ActionMapError: If the entry is not bindable or would create a cycle.
        """
        keys = parse_sequence(trigger)
        target: ActionMap = self
        for key in keys[:-1]:
            existing = target._bindings.get(key)
            if not isinstance(existing, ActionMap):
                if existing is not None:
                    logger.debug(
                        "Prefix %r in map %r replaces binding %r.", key, target.name, existing
                    )
                existing = ActionMap(name=f"{target.name or 'map'} {key}")
                target._bindings[key] = existing
            target = existing
        target._define_one(keys[-1], entry)

    def _define_one(self, key: str, entry: MapEntry) -> None:
        if isinstance(entry, ActionMap):
            if entry is self or entry.reaches(self):
                raise ActionMapError(
                    f"Binding {key!r} in map {self.name!r} to {entry.name!r} creates a cycle."
                )
        elif not (isinstance(entry, MapRef) or callable(entry)):
            raise ActionMapError(
                f"Cannot bind {key!r} in map {self.name!r} to non-callable {entry!r}."
            )
        self._bind(key, entry)

    def _bind(self, key: str, entry: MapEntry) -> None:
        """Stores an already validated entry under a canonical trigger."""
        self._bindings[key] = entry

    def undefine(self, trigger: TriggerSpec) -> Optional[MapEntry]:
        """Removes the local binding of `trigger` and returns it, if any."""
        keys = parse_sequence(trigger)
        target: ActionMap = self
        for key in keys[:-1]:
            existing = target._bindings.get(key)
            if not isinstance(existing, ActionMap):
                return None
            target = existing
        return target._bindings.pop(keys[-1], None)

    def set_parent(self, parent: Optional["ActionMap"]) -> None:
        """Attaches a fallback map, replacing any previous parent."""
        if parent is not None and (parent is self or parent.reaches(self)):
            raise ActionMapError(
                f"Using {parent.name!r} as parent of {self.name!r} creates a cycle."
            )
        self._parent = parent

    @property
    def parent(self) -> Optional["ActionMap"]:
        return self._parent

    def reaches(self, other: "ActionMap") -> bool:
        """True if `other` is reachable from this map through submaps or parents."""
        seen: set[int] = set()
        stack: list[ActionMap] = [self]
        while stack:
            current = stack.pop()
            if id(current) in seen:
                continue
            seen.add(id(current))
            for entry in current._bindings.values():
                if isinstance(entry, ActionMap):
                    if entry is other:
                        return True
                    stack.append(entry)
            if current._parent is not None:
                if current._parent is other:
                    return True
                stack.append(current._parent)
        return False

    # ---------------------- Lookup --------------------
    def lookup(self, trigger: str) -> Optional[MapEntry]:
        """Returns the entry bound to `trigger`, falling back to the parent."""
        try:
            key = normalize_trigger(trigger)
        except ValueError:
            return None
        entry = self._bindings.get(key)
        if entry is None and self._parent is not None:
            return self._parent.lookup(key)
        return entry

    def local_bindings(self) -> list[tuple[str, MapEntry]]:
        return list(self._bindings.items())

    def effective_bindings(self) -> list[tuple[str, MapEntry]]:
        """Local bindings in insertion order, then unshadowed parent bindings."""
        result = list(self._bindings.items())
        if self._parent is not None:
            result.extend(
                (key, entry)
                for key, entry in self._parent.effective_bindings()
                if key not in self._bindings
            )
        return result

    def __repr__(self) -> str:
        return f"ActionMap({self.name!r}, {len(self._bindings)} local bindings)"


## ==================== ComposedMap Class ====================
class ComposedMap(BaseActionMap):
    """First-match-wins view over an ordered list of maps."""

    def __init__(self, maps: Iterable[BaseActionMap], name: Optional[str] = None) -> None:
        self.maps: tuple[BaseActionMap, ...] = tuple(maps)
        self.name = name

    def lookup(self, trigger: str) -> Any:
        prefixes: list[BaseActionMap] = []
        for amap in self.maps:
            entry = amap.lookup(trigger)
            if entry is None:
                continue
            if not isinstance(entry, BaseActionMap):
                if not prefixes:
                    return entry
                continue
            prefixes.append(entry)
        if not prefixes:
            return None
        if len(prefixes) == 1:
            return prefixes[0]
        return ComposedMap(prefixes, name=prefixes[0].name)

    def effective_bindings(self) -> list[tuple[str, Any]]:
        keys: list[str] = []
        seen: set[str] = set()
        for amap in self.maps:
            for key, _ in amap.effective_bindings():
                if key not in seen:
                    seen.add(key)
                    keys.append(key)
        return [(key, self.lookup(key)) for key in keys]

    def __repr__(self) -> str:
        return f"ComposedMap({len(self.maps)} maps)"


def compose_ordered(maps: Iterable[BaseActionMap]) -> ComposedMap:
    """Composes maps so that earlier maps shadow later ones."""
    return ComposedMap(maps)


## ==================== MapRegistry Class ====================
class MapRegistry:
    """Owns the named action maps that `MapRef`s point at."""

    def __init__(self) -> None:
        self._maps: dict[str, ActionMap] = {}

    def register(self, name: str, amap: ActionMap) -> ActionMap:
        if not isinstance(amap, ActionMap):
            raise ActionMapError(f"Only action maps can be registered, got {amap!r}.")
        if name in self._maps and self._maps[name] is not amap:
            logger.warning("Map %r is being replaced in the registry.", name)
        if amap.name is None:
            amap.name = name
        self._maps[name] = amap
        return amap

    def get(self, name: str) -> ActionMap:
        try:
            return self._maps[name]
        except KeyError:
            raise ActionMapError(f"No action map named {name!r} is registered.") from None

    def resolve(self, entry: Any) -> Any:
        """Dereferences a `MapRef` once; other entries are returned as-is."""
        if isinstance(entry, MapRef):
            return self.get(entry.name)
        return entry

    def names(self) -> list[str]:
        return list(self._maps)

    def __contains__(self, name: object) -> bool:
        return name in self._maps

    def __len__(self) -> int:
        return len(self._maps)
