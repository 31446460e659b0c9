from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

logger = logging.getLogger(__name__)

from cmdpp.lib.config_parser import ShellConfig, load_config
from cmdpp.shell.errors import ShellError
from cmdpp.shell.interpreter import ExecutionContext, ShellInterpreter
from cmdpp.shell.repl import REPL

DEFAULT_CONFIG = Path('cmdpp.yaml')


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging.

    The prompt shares the terminal with log output, so only warnings are
    shown by default.

    Args:
        verbose: Enable debug logging
        quiet: Only show errors
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def generate_sample_config(output_path: Path) -> None:
    """Generate a sample configuration file.

    Args:
        output_path: Path to write the sample config
    """
    sample_config = """# shell section controls the interpreter
shell:
  # Appended to the current directory to form the prompt
  prompt_suffix: "> "

  # Typing this word alone ends the interactive session
  exit_command: exit

  # Files with this extension are run as scripts
  script_extension: .shl

  # Files with these extensions are launched as programs
  # (on POSIX, files with the executable bit are launched too)
  executable_extensions:
    - .exe

  # Print execution time after each builtin (toggle with: exetime)
  timing_enabled: false

  # Maximum nesting of scripts, goto sections and aliases
  max_depth: 64

  # Persist interactive history (requires readline)
  #history_file: ~/.cmdpp_history
  #history_length: 1000

# banner section controls the start-up text
banner:
  enabled: true
  # Text file typed out character by character on start and after cls
  #file: LICENSE
  delay_ms: 25
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        f.write(sample_config)

    logger.info(f"Generated sample configuration: {output_path}")
    print(f"Sample configuration written to: {output_path}")
    print("Edit the file and run:")
    print(f"  cmdpp --config {output_path}")


def _load_settings(config_path: Optional[Path]) -> ShellConfig:
    """Load settings from an explicit path, the default file, or defaults.

    Raises:
        FileNotFoundError: If an explicit path does not exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If validation fails
    """
    if config_path is None:
        if not DEFAULT_CONFIG.exists():
            logger.debug("No configuration file, using defaults")
            return ShellConfig()
        config_path = DEFAULT_CONFIG

    logger.debug(f"Loading configuration from {config_path}")
    return load_config(config_path).config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (sys.argv when None)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog='cmdpp',
        description="Interactive command interpreter with scripting, goto sections and aliases",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        'script',
        nargs='?',
        type=Path,
        help='Script file to run instead of starting an interactive session'
    )

    getting_started = parser.add_argument_group(
        'Getting Started',
        'Configuration and one-shot execution'
    )
    getting_started.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help=f'Path to configuration file (default: {DEFAULT_CONFIG} if present)'
    )
    getting_started.add_argument(
        '--generate-config',
        type=Path,
        metavar='PATH',
        help='Generate a sample configuration file and exit'
    )
    getting_started.add_argument(
        '--command', '-x',
        metavar='LINE',
        help='Execute a single command line and exit (e.g., "echo hello")'
    )

    general = parser.add_argument_group('General Options')
    general.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )
    general.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only report errors'
    )
    general.add_argument(
        '--no-banner',
        action='store_true',
        help='Do not print the banner on start'
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    if args.generate_config:
        generate_sample_config(args.generate_config)
        return 0

    try:
        config = _load_settings(args.config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        if args.verbose:
            logger.exception("Configuration error details:")
        return 2

    interpreter = ShellInterpreter(ExecutionContext(config))

    if args.command is not None:
        return 0 if interpreter.execute_line(args.command) else 1

    if args.script is not None:
        if not args.script.is_file():
            logger.error(f"Script not found: {args.script}")
            return 1
        try:
            interpreter.run_script(args.script)
        except ShellError as e:
            logger.error(str(e))
            return 1
        return 0

    REPL(interpreter, show_banner=not args.no_banner).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
