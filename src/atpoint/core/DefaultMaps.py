# atpoint/core/DefaultMaps.py
"""DefaultMaps.py
==================
Declarative action tables for every target kind.

Each table lists ``(trigger, command)`` pairs in display order. A command is
the name of a host operation, resolved through a `CommandTable`, or a
`MapRef` to a shared map. Maps whose targets carry a value get the
``general`` map as parent, so copying or inserting the target works
everywhere. The ``enter`` trigger is the default action of each kind.

User configuration may override any table from ``[keybindings.<kind>]``:
``trigger = "command"`` rebinds, ``trigger = ""`` unbinds and
``trigger = "@name"`` binds a prefix to the registered map ``name``.
"""

from typing import Any, Optional, Union

from atpoint.core.ActionMap import ActionMap, ActionMapError, MapRef, MapRegistry
from atpoint.core.Commands import CommandTable, StickyRegistry
from atpoint.core.Targets import TargetKind
from atpoint.core.Triggers import parse_sequence
from atpoint.utils.logging_config import logger

Binding = tuple[str, Union[str, MapRef]]

GENERAL_BINDINGS: list[Binding] = [
    ("w", "copy_to_clipboard"),
    ("i", "insert_text"),
]

HELP_BINDINGS: list[Binding] = [
    ("d", "describe_symbol"),
    ("i", "search_documentation"),
    ("a", "apropos"),
]

DEFAULT_BINDINGS: dict[str, list[Binding]] = {
    "region": [
        ("w", "copy"),
        ("k", "cut"),
        ("u", "upcase_region"),
        ("l", "downcase_region"),
        ("c", "capitalize_region"),
        (";", "toggle_comment_block"),
        ("tab", "handle_block_indent"),
        ("shift+tab", "handle_block_unindent"),
        ("s", "sort_lines"),
        ("f", "fill_region"),
    ],
    "url": [
        ("enter", "browse_url"),
        ("b", "browse_url"),
        ("e", "browse_url_externally"),
        ("d", "download_url"),
    ],
    "email": [
        ("enter", "compose_mail"),
        ("m", "compose_mail"),
    ],
    "file": [
        ("enter", "open_file"),
        ("o", "open_file_other_window"),
        ("x", "open_externally"),
        ("r", "rename_file"),
        ("d", "delete_file"),
        ("=", "diff_with_buffer"),
    ],
    "timestamp": [
        ("enter", "open_agenda_at_date"),
        ("up", "timestamp_up"),
        ("down", "timestamp_down"),
        ("t", "insert_today"),
    ],
    "table_cell": [
        ("enter", "edit_table_cell"),
        ("a", "align_table"),
        ("s", "sort_table"),
        ("=", "recalculate_table"),
        ("r k", "move_table_row_up"),
        ("r j", "move_table_row_down"),
        ("r i", "insert_table_row"),
        ("r d", "delete_table_row"),
        ("c h", "move_table_column_left"),
        ("c l", "move_table_column_right"),
        ("c i", "insert_table_column"),
        ("c d", "delete_table_column"),
    ],
    "heading": [
        ("enter", "toggle_heading_fold"),
        ("up", "move_subtree_up"),
        ("down", "move_subtree_down"),
        ("left", "promote_heading"),
        ("right", "demote_heading"),
        ("t", "cycle_todo"),
        ("n", "narrow_to_subtree"),
    ],
    "diagnostic": [
        ("enter", "show_diagnostic"),
        ("n", "next_diagnostic"),
        ("p", "previous_diagnostic"),
        ("f", "apply_quick_fix"),
    ],
    "xref": [
        ("enter", "find_definitions"),
        ("o", "find_definitions_other_window"),
        ("r", "find_references"),
    ],
    "function": [
        ("enter", "describe_function"),
        ("f", "find_function"),
        ("t", "trace_function"),
        ("h", MapRef("help")),
    ],
    "variable": [
        ("enter", "describe_variable"),
        ("f", "find_variable"),
        ("s", "set_variable"),
        ("h", MapRef("help")),
    ],
    "identifier": [
        ("enter", "find_definitions"),
        ("d", "find_definitions"),
        ("r", "find_references"),
        ("n", "rename_symbol"),
        ("h", "highlight_symbol"),
        ("s", "search_symbol"),
    ],
}

# Kinds whose targets carry a value; their maps inherit GENERAL_BINDINGS.
VALUE_KINDS: frozenset[str] = frozenset(
    {"url", "email", "file", "diagnostic", "xref", "function", "variable", "identifier"}
)

# Commands that keep the menu open so they can be repeated.
DEFAULT_STICKY: tuple[str, ...] = (
    "timestamp_up",
    "timestamp_down",
    "move_table_row_up",
    "move_table_row_down",
    "move_table_column_left",
    "move_table_column_right",
    "move_subtree_up",
    "move_subtree_down",
    "promote_heading",
    "demote_heading",
    "cycle_todo",
    "next_diagnostic",
    "previous_diagnostic",
)


def _merge_overrides(
    bindings: list[Binding],
    overrides: Optional[dict[str, Any]],
    table: str,
    configured_refs: Optional[set[tuple[str, ...]]] = None,
) -> list[Binding]:
    """Applies ``[keybindings.<table>]`` overrides to a default table.

    The key sequences of ``@name`` references taken from the configuration
    are added to `configured_refs`.
    """
    merged: dict[tuple[str, ...], Union[str, MapRef]] = {}
    for trigger, command in bindings:
        merged[parse_sequence(trigger)] = command

    for trigger, command in (overrides or {}).items():
        try:
            keys = parse_sequence(trigger)
        except ValueError as e:
            logger.error(
                "Error parsing trigger %r in [keybindings.%s]: %s. It will be ignored.",
                trigger, table, e,
            )
            continue
        if not command:
            merged.pop(keys, None)
            logger.debug("Trigger %r unbound in map %r by configuration.", trigger, table)
        elif isinstance(command, str) and command.startswith("@"):
            merged[keys] = MapRef(command[1:])
            if configured_refs is not None:
                configured_refs.add(keys)
        elif isinstance(command, str):
            merged[keys] = command
        else:
            logger.error(
                "Invalid command %r for trigger %r in [keybindings.%s]. It will be ignored.",
                command, trigger, table,
            )

    return [(" ".join(keys), command) for keys, command in merged.items()]


def build_map(name: str, bindings: list[Binding], commands: CommandTable) -> ActionMap:
    """Builds one action map, skipping commands the host does not provide."""
    amap = ActionMap(name=name)
    for trigger, spec in bindings:
        if isinstance(spec, MapRef):
            amap.define(trigger, spec)
            continue
        command = commands.get(spec)
        if command is None:
            continue
        try:
            amap.define(trigger, command)
        except (ValueError, ActionMapError) as e:
            logger.error("Cannot bind %r to %r in map %r: %s", trigger, spec, name, e)
    return amap


def _drop_dangling_refs(
    amap: ActionMap,
    registry: MapRegistry,
    table: str,
    configured_refs: set[tuple[str, ...]],
    prefix: tuple[str, ...] = (),
) -> None:
    """Removes configured ``@name`` bindings whose map is not registered.

    Prefix maps left empty by the removal are dropped as well.

    Raises:
        ActionMapError: If a built-in table refers to an unknown map.
    """
    for key, entry in amap.local_bindings():
        keys = (*prefix, key)
        if isinstance(entry, ActionMap):
            _drop_dangling_refs(entry, registry, table, configured_refs, keys)
            if not entry.local_bindings():
                amap.undefine(key)
        elif isinstance(entry, MapRef) and entry.name not in registry:
            if keys not in configured_refs:
                raise ActionMapError(
                    f"Trigger {' '.join(keys)!r} in map {table!r} refers to unknown map {entry.name!r}."
                )
            logger.error(
                "Unknown map %r for trigger %r in [keybindings.%s]. It will be ignored.",
                entry.name, " ".join(keys), table,
            )
            amap.undefine(key)


def build_default_maps(
    commands: CommandTable, config: Optional[dict[str, Any]] = None
) -> MapRegistry:
    """Builds and registers the general, help and per-kind maps.

    Args:
        commands: Resolves command names against the host.
        config: Application configuration; only ``keybindings`` is read.

    Returns:
        MapRegistry: Maps registered under ``general``, ``help`` and each
        `TargetKind` value.
    """
    overrides: dict[str, Any] = (config or {}).get("keybindings", {})
    registry = MapRegistry()
    configured_refs: dict[str, set[tuple[str, ...]]] = {}

    def merged(table: str, bindings: list[Binding]) -> list[Binding]:
        refs = configured_refs.setdefault(table, set())
        return _merge_overrides(bindings, overrides.get(table), table, refs)

    general = build_map("general", merged("general", GENERAL_BINDINGS), commands)
    registry.register("general", general)
    registry.register("help", build_map("help", merged("help", HELP_BINDINGS), commands))

    for kind in TargetKind:
        table = kind.value
        bindings = merged(table, DEFAULT_BINDINGS.get(table, []))
        amap = build_map(table, bindings, commands)
        if table in VALUE_KINDS:
            amap.set_parent(general)
        registry.register(table, amap)

    for table in registry.names():
        _drop_dangling_refs(registry.get(table), registry, table, configured_refs.get(table, set()))

    logger.debug("Built default action maps: %s", registry.names())
    return registry


def mark_default_sticky(
    sticky: StickyRegistry, commands: CommandTable, extra: tuple[str, ...] = ()
) -> StickyRegistry:
    """Marks the default repeatable commands, plus `extra` names, as sticky."""
    for name in (*DEFAULT_STICKY, *extra):
        command = commands.get(name)
        if command is not None:
            sticky.mark(command)
    return sticky
