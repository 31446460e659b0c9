"""Bundled builtin commands.

Importing this package registers every command with the shared registry.
"""

from cmdpp.commands import binary, console, files, system, text

__all__ = ["binary", "console", "files", "system", "text"]
