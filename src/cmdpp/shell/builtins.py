"""Command registry for builtin handlers.

Maps command names to handlers. A handler is any object with an
``execute(arguments, context)`` method; plain functions are wrapped in
``BuiltinCommand`` by the ``register`` decorator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Protocol

from cmdpp.shell.parser import Token

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

CommandFunc = Callable[[List[Token], "ExecutionContext"], None]


class CommandHandler(Protocol):
    """Capability every registered command provides."""

    def execute(self, arguments: List[Token], context: "ExecutionContext") -> None:
        """Run the command; report failures itself and return normally."""
        ...


class BuiltinCommand:
    """Handler backed by a plain function."""

    def __init__(self, name: str, description: str, func: CommandFunc):
        """Initialize builtin command.

        Args:
            name: Primary command name
            description: Help text
            func: Function called with (arguments, context)
        """
        self.name = name
        self.description = description
        self.func = func

    def execute(self, arguments: List[Token], context: "ExecutionContext") -> None:
        """Execute the command.

        Args:
            arguments: Argument tokens (command name already stripped)
            context: Session state
        """
        self.func(arguments, context)

    def __repr__(self) -> str:
        return f"BuiltinCommand({self.name!r})"


class CommandRegistry:
    """Registry of builtin shell commands.

    Names are case-sensitive. Binding a name that is already taken replaces
    the previous handler; several names may share one handler instance.
    """

    def __init__(self):
        """Initialize registry."""
        self.commands: Dict[str, CommandHandler] = {}

    def add(self, name: str, handler: CommandHandler) -> CommandHandler:
        """Bind a handler to a name.

        Args:
            name: Command name
            handler: Handler instance

        Returns:
            The handler, for chaining
        """
        if name in self.commands:
            logger.debug(f"Replacing handler for '{name}'")
        self.commands[name] = handler
        logger.debug(f"Registered builtin: {name}")
        return handler

    def register(
        self,
        name: str,
        description: str = "",
        aliases: Iterable[str] = ()
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to register a function as a builtin command.

        Args:
            name: Command name
            description: Help text
            aliases: Extra names bound to the same handler instance

        Returns:
            Decorator function
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            cmd = BuiltinCommand(name, description, func)
            self.add(name, cmd)
            for alias in aliases:
                self.add(alias, cmd)
            return func
        return decorator

    def lookup(self, name: str) -> Optional[CommandHandler]:
        """Get the handler bound to a name.

        Args:
            name: Command name

        Returns:
            Handler if found, None otherwise
        """
        return self.commands.get(name)

    def names(self) -> List[str]:
        """List registered names, sorted."""
        return sorted(self.commands)

    def list_commands(self) -> List[CommandHandler]:
        """List distinct handlers in registration order."""
        seen: Dict[int, CommandHandler] = {}
        for handler in self.commands.values():
            seen.setdefault(id(handler), handler)
        return list(seen.values())

    def aliases_of(self, handler: CommandHandler) -> List[str]:
        """List every name bound to a handler."""
        return [name for name, bound in self.commands.items() if bound is handler]

    def describe(self, name: str) -> str:
        """Get the help text of a command, empty if it has none."""
        handler = self.lookup(name)
        return getattr(handler, "description", "") if handler is not None else ""

    def __contains__(self, name: object) -> bool:
        return name in self.commands

    def __len__(self) -> int:
        return len(self.commands)


_registry = CommandRegistry()


def get_registry() -> CommandRegistry:
    """Get the global builtin registry.

    Returns:
        Registry instance (possibly not yet populated)
    """
    return _registry


def default_registry() -> CommandRegistry:
    """Get the global registry with every bundled command registered.

    Returns:
        Populated registry instance
    """
    # Importing the command modules registers them
    import cmdpp.commands  # noqa: F401
    return _registry
