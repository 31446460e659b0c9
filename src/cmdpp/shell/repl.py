"""REPL (Read-Eval-Print Loop) for the interactive shell.

The prompt shows the current directory. Each line goes through the
interpreter's line boundary, so a failing line never ends the session;
only the exit command (or end of input) does.
"""

from __future__ import annotations

import atexit
import logging
from pathlib import Path
from typing import Optional, Set, Union

from cmdpp.lib.banner import type_text
from cmdpp.shell.interpreter import ExecutionContext, ShellInterpreter
from cmdpp.shell.script import Script

logger = logging.getLogger(__name__)

try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False
    logger.debug("readline not available - command history disabled")

# History files already scheduled to be written at exit
_saved_history_files: Set[str] = set()


class REPL:
    """Read-Eval-Print Loop for the interactive shell."""

    def __init__(
        self,
        interpreter: Optional[ShellInterpreter] = None,
        show_banner: bool = True
    ):
        """Initialize REPL.

        Args:
            interpreter: Interpreter to drive (creates new if None)
            show_banner: Render the configured banner on start
        """
        self.interpreter = interpreter or ShellInterpreter()
        self.context = self.interpreter.context
        self.show_banner = show_banner
        self.running = False

        if HAS_READLINE and self.context.config.shell.history_file:
            self._setup_readline()

    @property
    def prompt(self) -> str:
        """Prompt string: current directory plus the configured suffix."""
        return f"{self.context.cwd}{self.context.config.shell.prompt_suffix}"

    def _setup_readline(self) -> None:
        """Setup readline for command history."""
        settings = self.context.config.shell
        history_file = settings.history_file
        try:
            readline.read_history_file(str(history_file))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not read history file {history_file}: {e}")

        key = str(history_file)
        if key not in _saved_history_files:
            _saved_history_files.add(key)
            atexit.register(self._save_history, history_file)

        readline.set_history_length(settings.history_length)

    @staticmethod
    def _save_history(history_file: Path) -> None:
        try:
            readline.write_history_file(str(history_file))
        except OSError as e:
            logger.warning(f"Could not write history file {history_file}: {e}")

    def run(self) -> None:
        """Run the REPL loop until the exit command or end of input."""
        self.running = True
        if self.show_banner:
            self._print_welcome()
        exit_command = self.context.config.shell.exit_command

        while self.running:
            try:
                line = input(self.prompt)
            except EOFError:
                # Ctrl+D
                print()
                break
            except KeyboardInterrupt:
                # Ctrl+C
                print()
                continue

            if line.strip() == exit_command:
                break
            try:
                self.interpreter.execute_line(line)
            except KeyboardInterrupt:
                print()
                logger.debug(f"Interrupted: {line!r}")

        self.running = False
        logger.debug("Interactive session ended")

    def _print_welcome(self) -> None:
        """Print the banner file, if one is configured."""
        banner = self.context.config.banner
        if banner.enabled and banner.file is not None:
            type_text(banner.file, banner.delay_ms)


def run_repl(
    context: Optional[ExecutionContext] = None,
    show_banner: bool = True
) -> None:
    """Run interactive REPL.

    Args:
        context: Optional execution context
        show_banner: Render the configured banner on start
    """
    repl = REPL(ShellInterpreter(context), show_banner=show_banner)
    repl.run()


def run_command(command: str, context: Optional[ExecutionContext] = None) -> bool:
    """Run a single command line non-interactively.

    Args:
        command: Command line to execute
        context: Optional execution context

    Returns:
        True if the line ran without error
    """
    return ShellInterpreter(context).execute_line(command)


def run_script(
    script_path: Union[str, Path],
    context: Optional[ExecutionContext] = None
) -> Script:
    """Run a script file's top-level lines.

    Args:
        script_path: Path to script file
        context: Optional execution context

    Returns:
        Parsed script
    """
    logger.debug(f"Running script: {script_path}")
    return ShellInterpreter(context).run_script(script_path)
