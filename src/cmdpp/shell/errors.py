"""Exceptions raised by the resolution chain.

Every error raised while tokenizing or resolving a line derives from
``ShellError`` and is converted to a user-visible message at the line
boundary; none of them terminates the session.
"""

from __future__ import annotations

from typing import Sequence


class ShellError(Exception):
    """Base class for per-line interpreter errors."""
    pass


class UsageError(ShellError):
    """Raised when a directive is called with missing arguments."""
    pass


class UnknownCommandError(ShellError):
    """Raised when no resolution strategy matches a command name."""

    def __init__(self, command_name: str):
        self.command_name = command_name
        super().__init__(f"Unknown command: {command_name}")


class SectionNotFoundError(ShellError):
    """Raised when ``goto`` names a section the current script lacks."""

    def __init__(self, section_name: str):
        self.section_name = section_name
        super().__init__(f"Section not found in the file: {section_name}")


class GotoCycleError(ShellError):
    """Raised when ``goto`` targets a section that is already running."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"goto cycle detected: {' -> '.join(self.chain)}")


class AliasCycleError(ShellError):
    """Raised when an environment alias expands back into itself."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"alias cycle detected: {' -> '.join(self.chain)}")


class NestingDepthError(ShellError):
    """Raised when scripts, aliases and sections nest deeper than allowed."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Maximum nesting depth ({max_depth}) exceeded")


class ProcessLaunchError(ShellError):
    """Raised when an external executable cannot be started."""

    def __init__(self, command: str, reason: str = ""):
        self.command = command
        message = f"Failed to execute command: {command}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
