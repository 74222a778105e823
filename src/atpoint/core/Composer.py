# atpoint/core/Composer.py
"""Composer.py
==================
Runs the detectors and merges the matched action maps into one menu.

For one dispatch the composer produces two composed maps over the same
ordered list of matches:

- ``applied_map``: each matched map with its detector's value bound into
  every action, ready to be invoked with no arguments.
- ``raw_map``: the same maps with their actions left unapplied, for callers
  that want to supply their own argument.

A detector that raises is logged and counted as "no match"; the other
detectors still run.
"""

from typing import Any, Optional

from atpoint.core.ActionMap import (
    ActionMapError,
    BaseActionMap,
    ComposedMap,
    MapRegistry,
    compose_ordered,
)
from atpoint.core.Detectors import DetectorRegistry
from atpoint.core.MapTransformer import resolve_refs, transform
from atpoint.core.PointContext import PointContext
from atpoint.core.Targets import NO_VALUE, Target
from atpoint.utils.logging_config import logger


## ==================== ComposedMenu Class ====================
class ComposedMenu:
    """Result of one composition.

    Attributes:
        applied_map (ComposedMap): Bound, zero-argument actions.
        raw_map (ComposedMap): Unapplied actions.
        targets (list[Target]): The matches, in precedence order.
    """

    __slots__ = ("applied_map", "raw_map", "targets")

    def __init__(self, applied_map: ComposedMap, raw_map: ComposedMap, targets: list[Target]) -> None:
        self.applied_map = applied_map
        self.raw_map = raw_map
        self.targets = targets

    @property
    def is_empty(self) -> bool:
        return not self.targets

    def __repr__(self) -> str:
        kinds = ", ".join(t.kind.value for t in self.targets)
        return f"ComposedMenu([{kinds}])"


## ==================== Composer Class ====================
class Composer:
    """Builds a `ComposedMenu` for a point context.

    Attributes:
        detectors (DetectorRegistry): Detectors to run, in precedence order.
        maps (MapRegistry): Registry that resolves the maps targets refer to.
    """

    def __init__(self, detectors: DetectorRegistry, maps: Optional[MapRegistry] = None) -> None:
        self.detectors = detectors
        self.maps = maps if maps is not None else MapRegistry()

    def detect(self, context: PointContext) -> list[Target]:
        """Runs every detector in order and returns the matches."""
        targets: list[Target] = []
        for detector in self.detectors:
            try:
                target = detector.detect(context)
            except Exception:
                logger.exception(
                    "Detector %r failed; treating it as no match.", getattr(detector, "name", detector)
                )
                continue
            if target is not None:
                logger.debug("Detector %r matched: %r", detector.name, target)
                targets.append(target)
        return targets

    def _target_map(self, target: Target) -> BaseActionMap:
        amap: Any = self.maps.resolve(target.map)
        if not isinstance(amap, BaseActionMap):
            raise ActionMapError(f"Target {target!r} does not refer to an action map.")
        return amap

    def compose(self, context: PointContext) -> ComposedMenu:
        """Detects targets at point and composes their maps.

        Returns:
            ComposedMenu: Both composed maps are empty when nothing matched.

        Raises:
            ActionMapError: If a matched map is malformed.
        """
        targets = self.detect(context)
        raw_maps: list[BaseActionMap] = []
        applied_maps: list[BaseActionMap] = []
        for target in targets:
            amap = resolve_refs(self._target_map(target), self.maps)
            raw_maps.append(amap)
            if target.value is NO_VALUE:
                applied_maps.append(amap)
            else:
                applied_maps.append(transform(amap, target.value, self.maps))

        menu = ComposedMenu(compose_ordered(applied_maps), compose_ordered(raw_maps), targets)
        logger.info("Composed menu at %r: %r", context, menu)
        return menu
