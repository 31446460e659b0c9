"""cmdpp - interactive command interpreter.

A line-oriented shell with builtin file utilities, a script format with
named sections reachable through goto, and environment variables usable
as command aliases.

Features:
- Builtin commands (file copy/compare, hex dump, XOR encoding, trees, ...)
- Scripts with goto sections
- Executable launching
- Environment variable aliases
- Per-command execution timing
"""

__version__ = "1.0.0"
__license__ = "MIT"

from cmdpp.cli import main

__all__ = ["main", "__version__"]
