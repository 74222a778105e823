# atpoint/core/Dispatcher.py
"""Dispatcher.py
==================
Description:
-----------------------
The two entry points of the "act on thing at point" menu.

Interactive (`act`)
    Composes the menu, shows the applied map through the prompter and
    enters a transient capture state. The host's input loop then feeds each
    key to `handle_key`. A bound action runs and, unless it is sticky,
    closes the menu. A sticky action leaves the same menu active so it can be
    repeated (nudging a table row up several times, for example). A prefix
    key opens its submap. Any unbound key closes the menu and is left for the
    host to process.

Default (`act_default`)
    Composes the menu and immediately runs whatever the default trigger
    (``enter`` unless configured otherwise) is bound to. No binding is a
    silent no-op.

Intended Usage:
---------------
Build a dispatcher with `create_dispatcher(host, config)` once at startup.
Bind a key in the host to `dispatcher.act()` (or `act_default()`), and while
`dispatcher.capturing` is true route keypresses to `dispatcher.handle_key`.
Terminal hosts can use `run_interactive(read_key)` instead.
"""

from typing import Any, Callable, Optional

from atpoint.core.ActionMap import BaseActionMap
from atpoint.core.Commands import CommandTable, StickyRegistry, action_label
from atpoint.core.Composer import ComposedMenu, Composer
from atpoint.core.DefaultMaps import build_default_maps, mark_default_sticky
from atpoint.core.Detectors import DetectorRegistry, build_detector_registry
from atpoint.core.PointContext import PointContext, Probe
from atpoint.core.Triggers import normalize_trigger
from atpoint.utils.logging_config import TRIGGER_LOGGER, logger

Prompter = Callable[[BaseActionMap], None]
PrompterDone = Callable[[], None]


def _ignore_map(_action_map: BaseActionMap) -> None:
    return None


def _ignore() -> None:
    return None


## ==================== Dispatcher Class ====================
class Dispatcher:
    """Drives one "act at point" interaction at a time.

    Attributes:
        composer (Composer): Detects targets and composes menus.
        context_provider (Callable[[], PointContext]): Snapshots editor state.
        prompter (Prompter): Renders a menu map.
        prompter_done (PrompterDone): Dismisses the menu.
        sticky (StickyRegistry): Actions that keep the menu open.
        default_trigger (str): Trigger used by `act_default`.
        last_menu (Optional[ComposedMenu]): Result of the latest composition.
        commands (Optional[CommandTable]): Command table the maps were built from.
    """

    RECOGNIZED_OPTIONS = ("detectors", "prompter", "prompter_done", "default_trigger")

    def __init__(
        self,
        composer: Composer,
        context_provider: Callable[[], PointContext],
        prompter: Optional[Prompter] = None,
        prompter_done: Optional[PrompterDone] = None,
        sticky: Optional[StickyRegistry] = None,
        default_trigger: str = "enter",
    ) -> None:
        self.composer = composer
        self.context_provider = context_provider
        self.prompter: Prompter = prompter or _ignore_map
        self.prompter_done: PrompterDone = prompter_done or _ignore
        self.sticky = sticky if sticky is not None else StickyRegistry()
        self.default_trigger = normalize_trigger(default_trigger)
        self.last_menu: Optional[ComposedMenu] = None
        self.commands: Optional[CommandTable] = None
        self._root_map: Optional[BaseActionMap] = None
        self._current_map: Optional[BaseActionMap] = None

    # ---------------------- Configuration --------------------
    def configure(self, **options: Any) -> None:
        """Overrides `detectors`, `prompter`, `prompter_done` or `default_trigger`.

        Raises:
            TypeError: On an unrecognised option.
        """
        unknown = sorted(set(options) - set(self.RECOGNIZED_OPTIONS))
        if unknown:
            raise TypeError(f"Unrecognized dispatcher option(s): {', '.join(unknown)}")

        if "detectors" in options:
            detectors = options["detectors"]
            if not isinstance(detectors, DetectorRegistry):
                detectors = DetectorRegistry(detectors)
            self.composer.detectors = detectors
        if "prompter" in options:
            self.prompter = options["prompter"] or _ignore_map
        if "prompter_done" in options:
            self.prompter_done = options["prompter_done"] or _ignore
        if "default_trigger" in options:
            self.default_trigger = normalize_trigger(options["default_trigger"])
        logger.debug("Dispatcher reconfigured: %s", sorted(options))

    # ---------------------- Composition --------------------
    def compose(self) -> ComposedMenu:
        """Composes the menu for the current editor state."""
        context = self.context_provider()
        menu = self.composer.compose(context)
        self.last_menu = menu
        return menu

    @property
    def capturing(self) -> bool:
        return self._root_map is not None

    @property
    def active_map(self) -> Optional[BaseActionMap]:
        """The map keys are currently looked up in (a submap after a prefix key)."""
        return self._current_map

    # ---------------------- Interactive entry point --------------------
    def act(self) -> ComposedMenu:
        """Shows the menu for the thing at point and starts capturing keys."""
        if self.capturing:
            logger.debug("act() called while capturing; closing the previous menu.")
            self._exit_capture()
        menu = self.compose()
        self._root_map = self._current_map = menu.applied_map
        self.prompter(menu.applied_map)
        return menu

    def handle_key(self, trigger: str) -> bool:
        """Processes one key while the menu is active.

        Args:
            trigger: The canonical trigger of the pressed key.

        Returns:
            bool: True if the key was consumed by the menu. False when the
            menu is not active or the key is unbound (the menu is closed and
            the host should handle the key itself).

        Raises:
            Exception: Whatever the invoked action raises, after the menu has
            been closed.
        """
        if not self.capturing or self._current_map is None:
            return False
        TRIGGER_LOGGER.debug("atpoint menu key: %r", trigger)

        entry = self._current_map.lookup(trigger)
        if entry is None:
            logger.debug("Trigger %r is unbound in the menu; leaving capture mode.", trigger)
            self._exit_capture()
            return False

        if isinstance(entry, BaseActionMap):
            logger.debug("Trigger %r is a prefix; opening %r.", trigger, entry.name)
            self._current_map = entry
            self.prompter(entry)
            return True

        descended = self._current_map is not self._root_map
        self._current_map = self._root_map
        logger.info("Running %r from the menu (trigger %r).", action_label(entry), trigger)
        try:
            entry()
        except Exception:
            logger.exception("Action bound to %r failed.", trigger)
            self._exit_capture()
            raise

        if self.sticky.is_sticky(entry):
            if descended and self._root_map is not None:
                self.prompter(self._root_map)
            logger.debug("Action for %r is sticky; menu stays open.", trigger)
            return True

        self._exit_capture()
        return True

    def cancel(self) -> None:
        """Leaves capture mode, closing the menu, if it is active."""
        if self.capturing:
            self._exit_capture()

    def _exit_capture(self) -> None:
        self._root_map = None
        self._current_map = None
        self.prompter_done()

    def run_interactive(self, read_key: Callable[[], Optional[str]]) -> ComposedMenu:
        """Runs a whole interaction, reading keys with `read_key`.

        `read_key` returns the next trigger, or None to abort.
        """
        menu = self.act()
        while self.capturing:
            trigger = read_key()
            if trigger is None:
                self.cancel()
                break
            self.handle_key(trigger)
        return menu

    # ---------------------- Default entry point --------------------
    def act_default(self) -> bool:
        """Runs the default action for the thing at point.

        Returns:
            bool: True if an action ran, False if there was none.
        """
        menu = self.compose()
        entry = menu.applied_map.lookup(self.default_trigger)
        if entry is None:
            logger.debug("No default action at point for trigger %r.", self.default_trigger)
            return False
        if isinstance(entry, BaseActionMap):
            logger.debug("Default trigger %r is a prefix; nothing to run.", self.default_trigger)
            return False
        logger.info("Running default action %r.", action_label(entry))
        entry()
        return True


def create_dispatcher(
    host: Any = None,
    config: Optional[dict[str, Any]] = None,
    prompter: Optional[Prompter] = None,
    prompter_done: Optional[PrompterDone] = None,
    probes: Optional[dict[str, Probe]] = None,
    context_provider: Optional[Callable[[], PointContext]] = None,
) -> Dispatcher:
    """Builds a dispatcher with the default detectors, maps and sticky set.

    Args:
        host: Editor object providing buffer attributes and command methods.
            None builds an inspection-only dispatcher whose commands are
            unresolved.
        config: Application configuration (see `atpoint.utils.utils`).
        prompter / prompter_done: Menu callbacks.
        probes: Extra host probes, merged over ``host.atpoint_probes``.
        context_provider: Overrides the default `PointContext.from_editor`.

    Returns:
        Dispatcher: Ready to use.
    """
    config = config or {}
    section = config.get("atpoint", {})
    use_system_clipboard = config.get("editor", {}).get("use_system_clipboard", True)

    commands = CommandTable(host, use_system_clipboard=use_system_clipboard)
    maps = build_default_maps(commands, config)
    detectors = build_detector_registry(config)
    sticky = mark_default_sticky(
        StickyRegistry(), commands, extra=tuple(section.get("sticky", ()))
    )

    default_trigger = section.get("default_trigger", "enter")
    try:
        normalize_trigger(default_trigger)
    except ValueError as e:
        logger.error(f"Invalid default_trigger {default_trigger!r} in [atpoint]: {e}. Using 'enter'.")
        default_trigger = "enter"

    if context_provider is None:
        if host is None:
            raise ValueError("A context provider is required when no host is given.")

        def context_provider() -> PointContext:
            return PointContext.from_editor(host, probes)

    dispatcher = Dispatcher(
        Composer(detectors, maps),
        context_provider,
        prompter=prompter,
        prompter_done=prompter_done,
        sticky=sticky,
        default_trigger=default_trigger,
    )
    dispatcher.commands = commands
    logger.info(
        "Dispatcher ready: %d detectors, %d maps, %d sticky actions.",
        len(detectors), len(maps), len(sticky),
    )
    return dispatcher
