"""Shell interpreter: the command resolution chain.

Each line is tokenized, its first token taken as the command name, and the
name resolved in a fixed priority order:

    1. builtin handler from the registry
    2. ``goto <section>`` inside the running script
    3. executable file
    4. script file
    5. ``exetime`` timing toggle
    6. environment variable alias
    7. unknown command

Errors raised anywhere in the chain are reported at the line boundary
(``execute_line``) and never abort the enclosing session or script.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, MutableMapping, Optional, Tuple, Union

from cmdpp.lib.config_parser import ShellConfig
from cmdpp.lib.process import is_executable, launch_executable
from cmdpp.shell.builtins import CommandHandler, CommandRegistry, default_registry
from cmdpp.shell.errors import (
    AliasCycleError,
    GotoCycleError,
    NestingDepthError,
    ProcessLaunchError,
    SectionNotFoundError,
    ShellError,
    UnknownCommandError,
    UsageError,
)
from cmdpp.shell.parser import Token, argument_values, split_command
from cmdpp.shell.script import Script, parse_script

logger = logging.getLogger(__name__)

GOTO = "goto"
EXETIME = "exetime"
COMMENT_PREFIX = "#"


@dataclass(frozen=True)
class ExecutionTiming:
    """Duration of one builtin invocation.

    Every unit is derived from the single microsecond measurement.
    """

    microseconds: int

    @property
    def milliseconds(self) -> float:
        return self.microseconds / 1000.0

    @property
    def seconds(self) -> float:
        return self.microseconds / 1000000.0

    @property
    def minutes(self) -> float:
        return self.microseconds / 60000000.0

    def report_lines(self) -> List[str]:
        """Format the timing report.

        Returns:
            Lines to print, header first
        """
        return [
            "Execution time:",
            f"{self.microseconds} microseconds",
            f"{self.milliseconds:g} milliseconds",
            f"{self.seconds:g} seconds",
            f"{self.minutes:g} minutes",
        ]


class ExecutionContext:
    """Session state shared by every resolution and handler.

    Holds the current directory, the timing toggle, the environment used
    for aliases, and the executed line history. Mutated in place for the
    whole session.
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        cwd: Optional[Union[str, Path]] = None,
        environ: Optional[MutableMapping[str, str]] = None
    ):
        """Initialize execution context.

        Args:
            config: Loaded configuration (defaults when None)
            cwd: Starting directory (process working directory when None)
            environ: Environment mapping (os.environ when None)
        """
        self.config = config or ShellConfig()
        self.cwd: str = str(cwd) if cwd is not None else os.getcwd()
        self.environ: MutableMapping[str, str] = os.environ if environ is None else environ
        self.timing_enabled: bool = self.config.shell.timing_enabled
        self.history: List[str] = []
        self.last_timing: Optional[ExecutionTiming] = None
        self.registry: Optional[CommandRegistry] = None

    def resolve_path(self, value: Union[str, Path]) -> Path:
        """Interpret a path relative to the current directory.

        Args:
            value: Relative or absolute path

        Returns:
            Path anchored at the current directory
        """
        return Path(self.cwd) / value

    def change_directory(self, target: Union[str, Path]) -> str:
        """Change the current directory.

        Updates both the in-memory directory and the process directory.

        Args:
            target: Directory, relative to the current one

        Returns:
            New current directory

        Raises:
            NotADirectoryError: If the target is not an existing directory
        """
        new_path = self.resolve_path(target)
        if not new_path.is_dir():
            raise NotADirectoryError(f"Invalid directory: {target}")
        new_path = new_path.resolve()
        os.chdir(new_path)
        self.cwd = str(new_path)
        logger.debug(f"Current directory: {self.cwd}")
        return self.cwd

    def toggle_timing(self) -> bool:
        """Flip the execution timing flag.

        Returns:
            New flag value
        """
        self.timing_enabled = not self.timing_enabled
        return self.timing_enabled

    def get_history(self) -> List[str]:
        """Get executed lines.

        Returns:
            Copy of the history
        """
        return self.history.copy()

    def clear_history(self) -> None:
        """Clear executed line history."""
        self.history.clear()


class ShellInterpreter:
    """Resolves command lines to an execution strategy and runs them."""

    def __init__(
        self,
        context: Optional[ExecutionContext] = None,
        registry: Optional[CommandRegistry] = None
    ):
        """Initialize interpreter.

        Args:
            context: Session state (creates new if None)
            registry: Builtin commands (bundled commands if None)
        """
        self.context = context or ExecutionContext()
        self.registry = registry if registry is not None else default_registry()
        self.context.registry = self.registry
        self._depth = 0
        # (script id, section name) of every section currently running
        self._sections: List[Tuple[int, str]] = []
        self._aliases: List[str] = []

    # Line boundary

    def execute_line(self, line: str, script: Optional[Script] = None) -> bool:
        """Execute one line, reporting any failure instead of raising.

        Blank lines and lines starting with '#' are skipped.

        Args:
            line: Raw command line
            script: Script the line belongs to, for goto lookups

        Returns:
            True if the line ran (or was skipped), False if it failed
        """
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            return True

        self.context.history.append(stripped)
        try:
            command_name, arguments = split_command(line)
            if command_name is None:
                return True
            self.resolve(command_name, arguments, script)
            return True
        except ShellError as e:
            logger.debug(f"Line failed: {stripped!r}: {e}")
            print(str(e), file=sys.stderr)
        except Exception as e:
            logger.exception(f"Unexpected failure on line: {stripped!r}")
            print(f"Error: {e}", file=sys.stderr)
        return False

    def run_script(self, path: Union[str, Path]) -> Script:
        """Parse a script and run its top-level lines in order.

        Sections only run when reached through goto.

        Args:
            path: Script file

        Returns:
            Parsed script
        """
        script = parse_script(path)
        logger.debug(
            f"Running script {path}: {len(script.lines)} line(s), "
            f"sections {sorted(script.sections)}"
        )
        with self._nested():
            for line in script.lines:
                self.execute_line(line, script)
        return script

    # Resolution chain

    def resolve(
        self,
        command_name: str,
        arguments: List[Token],
        script: Optional[Script] = None
    ) -> None:
        """Resolve a command name and run the first matching strategy.

        Args:
            command_name: First token of the line
            arguments: Remaining tokens
            script: Script being run, if any

        Raises:
            ShellError: If resolution fails
        """
        handler = self.registry.lookup(command_name)
        if handler is not None:
            self._run_builtin(command_name, handler, arguments)
            return

        if command_name == GOTO:
            self._goto(arguments, script)
            return

        settings = self.context.config.shell
        path = self.context.resolve_path(command_name)

        if is_executable(path, settings.executable_extensions, settings.script_extension):
            self._launch(path, arguments)
            return

        if path.is_file() and path.suffix.lower() == settings.script_extension:
            self.run_script(path)
            return

        if command_name == EXETIME:
            enabled = self.context.toggle_timing()
            print(f"Execution timing {'enabled' if enabled else 'disabled'}")
            return

        if command_name in self.context.environ:
            self._expand_alias(command_name, arguments, script)
            return

        raise UnknownCommandError(command_name)

    def _run_builtin(self, name: str, handler: CommandHandler, arguments: List[Token]) -> None:
        if not self.context.timing_enabled:
            handler.execute(arguments, self.context)
            return

        start = time.perf_counter_ns()
        handler.execute(arguments, self.context)
        elapsed_us = (time.perf_counter_ns() - start) // 1000

        timing = ExecutionTiming(elapsed_us)
        self.context.last_timing = timing
        logger.debug(f"{name} took {elapsed_us} us")
        print("\n".join(timing.report_lines()))

    def _goto(self, arguments: List[Token], script: Optional[Script]) -> None:
        if not arguments:
            raise UsageError("Usage: goto <section>")

        name = arguments[0].text
        body = script.get_section(name) if script is not None else None
        if body is None:
            raise SectionNotFoundError(name)

        key = (id(script), name)
        if key in self._sections:
            chain = [section for _, section in self._sections]
            raise GotoCycleError([*chain, name])

        with self._nested():
            self._sections.append(key)
            try:
                for line in body:
                    self.execute_line(line, script)
            finally:
                self._sections.pop()

    def _launch(self, path: Path, arguments: List[Token]) -> None:
        try:
            launch_executable(
                path,
                argument_values(arguments),
                cwd=self.context.cwd,
                env=self.context.environ
            )
        except OSError as e:
            raise ProcessLaunchError(str(path), e.strerror or str(e)) from e

    def _expand_alias(
        self,
        name: str,
        arguments: List[Token],
        script: Optional[Script]
    ) -> None:
        if name in self._aliases:
            raise AliasCycleError([*self._aliases, name])

        head, tail = split_command(self.context.environ[name])
        if head is None:
            raise UnknownCommandError(name)

        logger.debug(f"Alias {name} -> {head}")
        with self._nested():
            self._aliases.append(name)
            try:
                self.resolve(head, [*tail, *arguments], script)
            finally:
                self._aliases.pop()

    @contextlib.contextmanager
    def _nested(self) -> Iterator[None]:
        max_depth = self.context.config.shell.max_depth
        if self._depth >= max_depth:
            raise NestingDepthError(max_depth)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
