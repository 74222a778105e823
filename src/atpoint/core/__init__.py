# src/atpoint/core/__init__.py
"""Public facade for atpoint.core: re-export main classes from CamelCase modules.

Keeps the per-component file names (ActionMap.py, Dispatcher.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .ActionMap import ActionMap, ActionMapError, ComposedMap, MapRef, MapRegistry, compose_ordered  # noqa: F401
from .Commands import BoundAction, Command, CommandTable, StickyRegistry  # noqa: F401
from .Composer import ComposedMenu, Composer  # noqa: F401
from .Detectors import Detector, DetectorRegistry  # noqa: F401
from .Dispatcher import Dispatcher, create_dispatcher  # noqa: F401
from .MapTransformer import transform  # noqa: F401
from .PointContext import PointContext  # noqa: F401
from .Targets import NO_VALUE, Target, TargetKind  # noqa: F401


__all__ = [
    "ActionMap",
    "ActionMapError",
    "ComposedMap",
    "MapRef",
    "MapRegistry",
    "compose_ordered",
    "BoundAction",
    "Command",
    "CommandTable",
    "StickyRegistry",
    "ComposedMenu",
    "Composer",
    "Detector",
    "DetectorRegistry",
    "Dispatcher",
    "create_dispatcher",
    "transform",
    "PointContext",
    "NO_VALUE",
    "Target",
    "TargetKind",
]
