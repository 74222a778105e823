# atpoint/core/Commands.py
"""Commands.py
==================
Action references and the host command table.

Description:
-----------------------
An action map never implements editor operations itself. Its leaves are
references to operations exposed by the host editor. This module provides:

- `Command`: a named, identity-compared reference to one host operation.
- `BoundAction`: the zero-argument closure the map transformer puts in place
  of a leaf, invoking the original reference with the detected value.
- `StickyRegistry`: the set of references that keep the transient menu open
  after they run.
- `CommandTable`: resolves command names against a host object, the way a
  key binder resolves action names against editor methods. Commands are
  interned, so the same name always yields the same `Command` object.
- `Clipboard`: backs the built-in `copy_to_clipboard` command.
"""

from typing import Any, Callable, Iterable, Optional

import pyperclip

from atpoint.utils.logging_config import logger


class CommandUnavailableError(RuntimeError):
    """Raised when an unresolved command is invoked."""


## ==================== Command Class ====================
class Command:
    """A named reference to a host operation.

    Attributes:
        name (str): The host-side name of the operation.
        func (Optional[Callable]): The resolved callable, or None when the
            command was created without a host (inspection mode).
        label (str): Human readable text shown in menus.
    """

    def __init__(
        self, name: str, func: Optional[Callable[..., Any]] = None, label: Optional[str] = None
    ) -> None:
        self.name = name
        self.func = func
        self.label = label or name.replace("_", " ")

    @property
    def available(self) -> bool:
        return self.func is not None

    def __call__(self, *args: Any) -> Any:
        if self.func is None:
            raise CommandUnavailableError(
                f"Command {self.name!r} is not provided by the host."
            )
        logger.debug("Invoking command %r with %d argument(s).", self.name, len(args))
        return self.func(*args)

    def __repr__(self) -> str:
        state = "" if self.available else ", unresolved"
        return f"Command({self.name!r}{state})"


## ==================== BoundAction Class ====================
class BoundAction:
    """Zero-argument closure over an action reference and a bound value."""

    __slots__ = ("action", "value")

    def __init__(self, action: Callable[..., Any], value: Any) -> None:
        self.action = action
        self.value = value

    def __call__(self) -> Any:
        return self.action(self.value)

    @property
    def label(self) -> str:
        return action_label(self.action)

    def __repr__(self) -> str:
        return f"BoundAction({self.action!r}, {self.value!r})"


def unwrap_action(entry: Any) -> Any:
    """Returns the underlying action reference of a possibly bound entry."""
    while isinstance(entry, BoundAction):
        entry = entry.action
    return entry


def action_label(entry: Any) -> str:
    """Returns the menu label for an action reference."""
    entry = unwrap_action(entry)
    label = getattr(entry, "label", None)
    if isinstance(label, str):
        return label
    name = getattr(entry, "__name__", None)
    if name and name != "<lambda>":
        return name.replace("_", " ")
    return repr(entry)


## ==================== StickyRegistry Class ====================
class StickyRegistry:
    """Set of action references that keep the transient menu open.

    Markers are added at setup time and never removed. Lookups unwrap bound
    actions, so marking a `Command` makes every closure over it sticky.
    """

    def __init__(self, actions: Iterable[Any] = ()) -> None:
        self._marked: set[Any] = set()
        self.mark(*actions)

    def mark(self, *actions: Any) -> None:
        for action in actions:
            ref = unwrap_action(action)
            if ref is None:
                continue
            self._marked.add(ref)
            logger.debug("Marked %r as sticky.", ref)

    def is_sticky(self, entry: Any) -> bool:
        try:
            return unwrap_action(entry) in self._marked
        except TypeError:
            # Unhashable callables cannot have been marked.
            return False

    def __contains__(self, entry: Any) -> bool:
        return self.is_sticky(entry)

    def __len__(self) -> int:
        return len(self._marked)


## ==================== Clipboard Class ====================
class Clipboard:
    """System clipboard through pyperclip with an internal fallback."""

    def __init__(self, use_system_clipboard: bool = True) -> None:
        self.use_system_clipboard = use_system_clipboard
        self.internal: str = ""

    def copy(self, value: Any) -> bool:
        """Copies the text of `value` to the clipboard.

        The internal clipboard is always updated. Returns True when the
        system clipboard was updated as well.
        """
        text = str(value)
        self.internal = text
        if not self.use_system_clipboard:
            logger.debug("System clipboard disabled; copied %d chars internally.", len(text))
            return False
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.warning(
                f"System clipboard unavailable via pyperclip: {e}. Kept internal copy only."
            )
            return False
        logger.info("Copied %d chars to system clipboard.", len(text))
        return True


## ==================== CommandTable Class ====================
class CommandTable:
    """Interns `Command` objects for a host.

    Attributes:
        host: The host editor object whose methods implement commands, or
            None for inspection mode where commands stay unresolved.
        clipboard (Clipboard): Clipboard used by `copy_to_clipboard`.
    """

    def __init__(self, host: Any = None, use_system_clipboard: bool = True) -> None:
        self.host = host
        self.clipboard = Clipboard(use_system_clipboard)
        self._commands: dict[str, Command] = {}
        self._missing: set[str] = set()
        self.register("copy_to_clipboard", self.clipboard.copy, label="copy")

    def register(
        self, name: str, func: Callable[..., Any], label: Optional[str] = None
    ) -> Command:
        """Registers a command implemented outside the host."""
        if name in self._commands:
            logger.warning("Command %r is being redefined.", name)
        command = Command(name, func, label)
        self._commands[name] = command
        return command

    def get(self, name: str) -> Optional[Command]:
        """Returns the interned command for `name`.

        Returns None when a host is attached but does not implement `name`.
        """
        command = self._commands.get(name)
        if command is not None:
            return command

        if self.host is None:
            command = Command(name)
        else:
            func = getattr(self.host, name, None)
            if not callable(func):
                if name in self._missing:
                    return None
                self._missing.add(name)
                logger.warning(
                    f"Command '{name}' is not implemented by host "
                    f"{type(self.host).__name__}. It will not be bound."
                )
                return None
            command = Command(name, func)

        self._commands[name] = command
        return command

    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands
