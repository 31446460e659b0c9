"""Shell module: tokenizer, command registry, script model and interpreter.

Provides the interactive line interpreter, its script format with
``goto`` sections, and the resolution chain that maps a command name to a
builtin, an executable, a script or an environment alias.
"""

from __future__ import annotations

from cmdpp.shell.builtins import BuiltinCommand, CommandRegistry, default_registry, get_registry
from cmdpp.shell.errors import ShellError
from cmdpp.shell.interpreter import ExecutionContext, ExecutionTiming, ShellInterpreter
from cmdpp.shell.parser import Token, TokenType, split_command, tokenize
from cmdpp.shell.repl import REPL, run_command, run_repl, run_script
from cmdpp.shell.script import Script, parse_script

__all__ = [
    "REPL",
    "BuiltinCommand",
    "CommandRegistry",
    "ExecutionContext",
    "ExecutionTiming",
    "Script",
    "ShellError",
    "ShellInterpreter",
    "Token",
    "TokenType",
    "default_registry",
    "get_registry",
    "parse_script",
    "run_command",
    "run_repl",
    "run_script",
    "split_command",
    "tokenize",
]
