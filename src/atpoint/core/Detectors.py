# atpoint/core/Detectors.py
"""Detectors.py
==================
Description:
-----------------------
Target detectors and the ordered registry that runs them.

A detector looks at a `PointContext` and either returns None ("not here") or
a `Target` naming the action map for its kind and the value to bind. Every
detector runs on every dispatch, so each one checks its cheapest
precondition first (a selection flag, the buffer mode, a character on the
line, the presence of a host probe) and only then runs its real probe.

Registry order is precedence: when two matched maps bind the same trigger,
the map of the earlier detector wins.

Built-in detectors, in default order:
    region, url, email, file, timestamp, table_cell, heading,
    diagnostic, xref, function, variable, identifier
"""

import os
import re
from typing import Any, Callable, Iterable, Iterator, Optional

from atpoint.core.ActionMap import MapRef
from atpoint.core.PointContext import PointContext
from atpoint.core.Targets import NO_VALUE, Target, TargetKind
from atpoint.utils.logging_config import logger

URL_RE = re.compile(r"(?:(?:https?|ftp|file)://|www\.)[^\s<>\"'`]+")
EMAIL_RE = re.compile(r"(?:mailto:)?[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PATH_RE = re.compile(r"[\w~.+/\\-]+")
ORG_TIMESTAMP_RE = re.compile(r"[<\[]\d{4}-\d{2}-\d{2}[^>\]\n]*[>\]]")
ISO_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?")
TABLE_ROW_RE = re.compile(r"^\s*\|.*\|\s*$")
MARKDOWN_HEADING_RE = re.compile(r"^#{1,6}\s+\S")
ORG_HEADING_RE = re.compile(r"^\*+\s+\S")

TRAILING_PUNCTUATION = ".,;:!?)]}"

DEFAULT_TABLE_MODES: tuple[str, ...] = ("org", "markdown", "md", "rst", "text")
DEFAULT_OUTLINE_MODES: tuple[str, ...] = ("org", "markdown", "md")

ProbeFn = Callable[[PointContext], Any]


## ==================== Detector Class ====================
class Detector:
    """A named probe for one target kind.

    Attributes:
        name (str): Registry key.
        kind (TargetKind): The kind reported in matching targets.
        map: The action map (or `MapRef`) reported in matching targets.
    """

    def __init__(
        self, name: str, kind: TargetKind, probe: ProbeFn, action_map: Any = None
    ) -> None:
        self.name = name
        self.kind = kind
        self._probe = probe
        self.map = action_map if action_map is not None else MapRef(kind.value)

    def detect(self, context: PointContext) -> Optional[Target]:
        """Returns a target when the probe matches, else None.

        The probe returns None for no match, `NO_VALUE` for a match without a
        value, or the value to bind.
        """
        value = self._probe(context)
        if value is None:
            return None
        return Target(self.kind, self.map, value)

    def __call__(self, context: PointContext) -> Optional[Target]:
        return self.detect(context)

    def __repr__(self) -> str:
        return f"Detector({self.name!r}, {self.kind.value})"


# ==================== Built-in probes ====================
def probe_region(ctx: PointContext) -> Any:
    return NO_VALUE if ctx.has_selection else None


def probe_url(ctx: PointContext) -> Optional[str]:
    if "://" not in ctx.line and "www." not in ctx.line:
        return None
    match = ctx.match_at_point(URL_RE)
    if match is None:
        return None
    url = match.group(0).rstrip(TRAILING_PUNCTUATION)
    if url.startswith("www."):
        url = "http://" + url
    return url


def probe_email(ctx: PointContext) -> Optional[str]:
    if "@" not in ctx.line:
        return None
    match = ctx.match_at_point(EMAIL_RE)
    if match is None:
        return None
    address = match.group(0)
    if address.startswith("mailto:"):
        address = address[len("mailto:"):]
    return address.rstrip(TRAILING_PUNCTUATION)


def probe_file(ctx: PointContext) -> Optional[str]:
    """Matches a path-like token at point naming an existing file or directory."""
    if not ctx.line.strip():
        return None
    match = ctx.match_at_point(PATH_RE)
    if match is None:
        return None
    token = match.group(0).rstrip(TRAILING_PUNCTUATION)
    if not any(c in token for c in "/\\.~") or token in (".", ".."):
        return None
    path = os.path.expanduser(token)
    if not os.path.isabs(path):
        path = os.path.join(ctx.buffer_dir, path)
    if not os.path.exists(path):
        return None
    return os.path.abspath(path)


def probe_timestamp(ctx: PointContext) -> Any:
    if not any(c.isdigit() for c in ctx.line):
        return None
    if ctx.match_at_point(ORG_TIMESTAMP_RE) or ctx.match_at_point(ISO_TIMESTAMP_RE):
        return NO_VALUE
    return None


def _is_table_row(ctx: PointContext) -> bool:
    line = ctx.line
    if not TABLE_ROW_RE.match(line):
        return False
    return line.index("|") <= ctx.cursor_x <= line.rindex("|")


def _is_heading(ctx: PointContext) -> bool:
    if ctx.mode == "org":
        return bool(ORG_HEADING_RE.match(ctx.line))
    return bool(MARKDOWN_HEADING_RE.match(ctx.line))


def make_table_probe(modes: Iterable[str]) -> ProbeFn:
    modes = frozenset(modes)

    def probe_table_cell(ctx: PointContext) -> Any:
        if ctx.mode not in modes:
            return None
        if ctx.has_probe("table_cell"):
            found = ctx.probe("table_cell")
        else:
            found = _is_table_row(ctx)
        return NO_VALUE if found else None

    return probe_table_cell


def make_heading_probe(modes: Iterable[str]) -> ProbeFn:
    modes = frozenset(modes)

    def probe_heading(ctx: PointContext) -> Any:
        if ctx.mode not in modes:
            return None
        if ctx.has_probe("heading"):
            found = ctx.probe("heading")
        else:
            found = _is_heading(ctx)
        return NO_VALUE if found else None

    return probe_heading


def probe_diagnostic(ctx: PointContext) -> Any:
    if not ctx.has_probe("diagnostic_at_point"):
        return None
    # Empty answers such as [] or "" are no match.
    return ctx.probe("diagnostic_at_point") or None


def probe_xref(ctx: PointContext) -> Any:
    if not ctx.has_probe("xref_at_point"):
        return None
    return ctx.probe("xref_at_point") or None


def make_symbol_probe(symbol_kind: str) -> ProbeFn:
    """Probe matching identifiers the host's symbol table reports as `symbol_kind`."""

    def probe_symbol(ctx: PointContext) -> Optional[str]:
        if not ctx.has_probe("symbol_kind"):
            return None
        name = ctx.identifier_at_point()
        if not name:
            return None
        return name if ctx.probe("symbol_kind", name) == symbol_kind else None

    probe_symbol.__name__ = f"probe_{symbol_kind}"
    return probe_symbol


def probe_identifier(ctx: PointContext) -> Optional[str]:
    if ctx.lexer is None:
        return None
    return ctx.identifier_at_point()


## ==================== DetectorRegistry Class ====================
class DetectorRegistry:
    """Ordered collection of detectors. Order is precedence."""

    def __init__(self, detectors: Iterable[Detector] = ()) -> None:
        self._detectors: list[Detector] = []
        for detector in detectors:
            self.register(detector)

    def register(
        self, detector: Detector, before: Optional[str] = None, after: Optional[str] = None
    ) -> Detector:
        """Adds `detector`, replacing any detector with the same name.

        Args:
            detector: The detector to add.
            before: Insert ahead of the detector with this name.
            after: Insert behind the detector with this name.

        Raises:
            KeyError: If `before` or `after` names an unknown detector.
        """
        if before is not None and after is not None:
            raise ValueError("Specify at most one of 'before' and 'after'.")
        self._detectors = [d for d in self._detectors if d.name != detector.name]
        if before is not None:
            self._detectors.insert(self._index(before), detector)
        elif after is not None:
            self._detectors.insert(self._index(after) + 1, detector)
        else:
            self._detectors.append(detector)
        logger.debug("Registered detector %r; order is now %s.", detector.name, self.names())
        return detector

    def unregister(self, name: str) -> Detector:
        detector = self._detectors.pop(self._index(name))
        logger.debug("Unregistered detector %r.", name)
        return detector

    def get(self, name: str) -> Detector:
        return self._detectors[self._index(name)]

    def reorder(self, names: Iterable[str]) -> None:
        """Keeps only the named detectors, in the given order."""
        self._detectors = [self.get(name) for name in names]

    def names(self) -> list[str]:
        return [d.name for d in self._detectors]

    def _index(self, name: str) -> int:
        for i, detector in enumerate(self._detectors):
            if detector.name == name:
                return i
        raise KeyError(f"No detector named {name!r}.")

    def __iter__(self) -> Iterator[Detector]:
        return iter(list(self._detectors))

    def __len__(self) -> int:
        return len(self._detectors)

    def __contains__(self, name: object) -> bool:
        return any(d.name == name for d in self._detectors)


def default_detectors(
    table_modes: Iterable[str] = DEFAULT_TABLE_MODES,
    outline_modes: Iterable[str] = DEFAULT_OUTLINE_MODES,
) -> list[Detector]:
    """Returns the built-in detectors in default precedence order."""
    return [
        Detector("region", TargetKind.REGION, probe_region),
        Detector("url", TargetKind.URL, probe_url),
        Detector("email", TargetKind.EMAIL, probe_email),
        Detector("file", TargetKind.FILE, probe_file),
        Detector("timestamp", TargetKind.TIMESTAMP, probe_timestamp),
        Detector("table_cell", TargetKind.TABLE_CELL, make_table_probe(table_modes)),
        Detector("heading", TargetKind.HEADING, make_heading_probe(outline_modes)),
        Detector("diagnostic", TargetKind.DIAGNOSTIC, probe_diagnostic),
        Detector("xref", TargetKind.XREF, probe_xref),
        Detector("function", TargetKind.FUNCTION, make_symbol_probe("function")),
        Detector("variable", TargetKind.VARIABLE, make_symbol_probe("variable")),
        Detector("identifier", TargetKind.IDENTIFIER, probe_identifier),
    ]


def build_detector_registry(config: Optional[dict[str, Any]] = None) -> DetectorRegistry:
    """Builds the registry from the ``[atpoint]`` configuration section.

    Recognised keys: ``detectors`` (ordered names to keep), ``table_modes``
    and ``outline_modes``. Unknown detector names are logged and skipped.
    """
    section = (config or {}).get("atpoint", {})
    registry = DetectorRegistry(
        default_detectors(
            table_modes=section.get("table_modes", DEFAULT_TABLE_MODES),
            outline_modes=section.get("outline_modes", DEFAULT_OUTLINE_MODES),
        )
    )
    order = section.get("detectors")
    if order:
        known = [name for name in order if name in registry]
        for name in order:
            if name not in registry:
                logger.error("Unknown detector %r in configuration. It will be ignored.", name)
        registry.reorder(known)
    return registry
