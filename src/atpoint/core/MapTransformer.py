# atpoint/core/MapTransformer.py
"""MapTransformer.py
==================
Partial application of a detected value into every action of a map.

Actions are written generically, taking the target as an explicit argument.
`transform()` rewrites a map so that each leaf becomes a zero-argument
`BoundAction` over the original reference and the value, which lets the
dispatcher invoke any entry without asking for more input.

Both functions below return new maps and leave their input untouched:
defining maps are shared by every dispatch.
"""

from typing import Any, Callable, Optional

from atpoint.core.ActionMap import (
    ActionMap,
    ActionMapError,
    BaseActionMap,
    MapRef,
    MapRegistry,
)
from atpoint.core.Commands import BoundAction
from atpoint.core.Targets import NO_VALUE


def _deref(entry: Any, registry: Optional[MapRegistry]) -> Any:
    if not isinstance(entry, MapRef):
        return entry
    if registry is None:
        raise ActionMapError(f"Cannot resolve {entry!r} without a map registry.")
    return registry.resolve(entry)


def _rebuild(
    amap: BaseActionMap,
    wrap: Callable[[Any], Any],
    registry: Optional[MapRegistry],
    stack: tuple[BaseActionMap, ...],
) -> ActionMap:
    if any(seen is amap for seen in stack):
        chain = " -> ".join(str(m.name) for m in (*stack, amap))
        raise ActionMapError(f"Cycle in action maps: {chain}")
    stack = (*stack, amap)

    result = ActionMap(name=amap.name)
    for key, entry in amap.effective_bindings():
        entry = _deref(entry, registry)
        if isinstance(entry, BaseActionMap):
            result._bind(key, _rebuild(entry, wrap, registry, stack))
        elif callable(entry):
            result._bind(key, wrap(entry))
        else:
            raise ActionMapError(
                f"Entry {entry!r} for {key!r} in map {amap.name!r} is not an action."
            )
    return result


def _has_refs(amap: BaseActionMap, stack: tuple[BaseActionMap, ...]) -> bool:
    if any(seen is amap for seen in stack):
        raise ActionMapError(f"Cycle in action maps through {amap.name!r}")
    stack = (*stack, amap)
    for _, entry in amap.effective_bindings():
        if isinstance(entry, MapRef):
            return True
        if isinstance(entry, BaseActionMap) and _has_refs(entry, stack):
            return True
    return False


def transform(
    amap: BaseActionMap, bound_value: Any, registry: Optional[MapRegistry] = None
) -> BaseActionMap:
    """Returns a copy of `amap` with `bound_value` applied to every action.

    Args:
        amap: The map to transform. Parent bindings are flattened into the
            result.
        bound_value: The value to bind. `NO_VALUE` returns `amap` itself.
        registry: Registry used to dereference `MapRef` entries.

    Returns:
        A structurally identical map of `BoundAction` leaves.

    Raises:
        ActionMapError: On a cycle, an unresolvable `MapRef` or a leaf that
            is not callable.
    """
    if bound_value is NO_VALUE:
        return amap
    return _rebuild(amap, lambda action: BoundAction(action, bound_value), registry, ())


def resolve_refs(amap: BaseActionMap, registry: Optional[MapRegistry] = None) -> BaseActionMap:
    """Returns `amap` with every `MapRef` replaced by the map it names.

    Leaves are kept as they are. A map without references is returned
    unchanged.
    """
    if not _has_refs(amap, ()):
        return amap
    return _rebuild(amap, lambda action: action, registry, ())
