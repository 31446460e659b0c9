"""Console commands: echo, cls, color, help, time, timer, clc, cmd."""

from __future__ import annotations

import logging
import re
import sys
import time
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List

from cmdpp.lib.banner import type_text
from cmdpp.lib.process import launch_session
from cmdpp.shell.builtins import get_registry
from cmdpp.shell.parser import Token, argument_values

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

_registry = get_registry()

CLEAR_SCREEN = "\033[2J\033[H"
RESET_COLOR = "\033[0m"

# Console color index (0-F) to ANSI color number
_CONSOLE_TO_ANSI = [0, 4, 2, 6, 1, 5, 3, 7]

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_FIRST_OPERAND = re.compile(rf"\s*({_NUMBER})")
_NEXT_TERM = re.compile(rf"\s*([-+*/])\s*({_NUMBER})")


@_registry.register("echo", "Print the arguments")
def echo_command(arguments: List[Token], context: "ExecutionContext") -> None:
    print(" ".join(argument_values(arguments)))


@_registry.register("cls", "Clear the screen")
def cls_command(arguments: List[Token], context: "ExecutionContext") -> None:
    print(CLEAR_SCREEN, end="", flush=True)
    banner = context.config.banner
    if banner.enabled and banner.file is not None:
        type_text(banner.file, banner.delay_ms)


def color_sequence(value: str) -> str:
    """Translate a color argument to an ANSI escape sequence.

    Accepts ``reset``, a console attribute of one or two hex digits
    (background then foreground, e.g. ``0A`` for light green on black), or
    a ``RRGGBB`` foreground color with an optional leading '#'.

    Args:
        value: Color argument

    Returns:
        Escape sequence

    Raises:
        ValueError: If the value is not a recognized color
    """
    if value.lower() == "reset":
        return RESET_COLOR

    digits = value[1:] if value.startswith('#') else value
    if not re.fullmatch(r"[0-9a-fA-F]{1,2}|[0-9a-fA-F]{6}", digits):
        raise ValueError(f"Invalid hex color format: {value}")

    if len(digits) == 6:
        red, green, blue = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        return f"\033[38;2;{red};{green};{blue}m"

    attribute = int(digits, 16)
    background, foreground = attribute >> 4, attribute & 0xF
    codes = []
    if len(digits) == 2:
        base = 100 if background & 0x8 else 40
        codes.append(base + _CONSOLE_TO_ANSI[background & 0x7])
    base = 90 if foreground & 0x8 else 30
    codes.append(base + _CONSOLE_TO_ANSI[foreground & 0x7])
    return f"\033[{';'.join(str(c) for c in codes)}m"


@_registry.register("color", "Set the text color: color <hex_color> | color reset")
def color_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 1:
        print("Usage: color <hex_color>", file=sys.stderr)
        return
    try:
        sequence = color_sequence(values[0])
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return
    print(sequence, end="", flush=True)


@_registry.register("help", "Show available commands")
def help_command(arguments: List[Token], context: "ExecutionContext") -> None:
    """Show help information.

    Args:
        arguments: Optional command name to describe
        context: Session state (provides the registry)
    """
    registry = context.registry or get_registry()
    values = argument_values(arguments)

    if values:
        name = values[0]
        if name not in registry:
            print(f"No help for '{name}'", file=sys.stderr)
            return
        print(f"{name} - {registry.describe(name) or 'no description'}")
        return

    lines = ["Available commands:", ""]
    for handler in registry.list_commands():
        names = ", ".join(registry.aliases_of(handler))
        description = getattr(handler, "description", "")
        lines.append(f"  {names:<20} {description}")
    lines.extend([
        "",
        "Directives:",
        "  goto <section>       Run a section of the current script",
        "  exetime              Toggle execution time reporting",
        "",
        f"Scripts: files ending in {context.config.shell.script_extension}",
        "Environment variables can be typed as commands (aliases).",
        f"Use {context.config.shell.exit_command} to quit",
    ])
    print("\n".join(lines))


def _format_remaining(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _now() -> datetime:
    return datetime.now()


@_registry.register("time", "Stopwatch: show the clock until Ctrl+C, then the elapsed time")
def time_command(arguments: List[Token], context: "ExecutionContext") -> None:
    start = _now()
    print(f"Started at: {start.ctime()}")
    print("Press Ctrl+C to stop")
    try:
        while True:
            print(f"\rTime: {_now().ctime()}", end="", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        logger.debug("Stopwatch stopped")
    end = _now()

    print()
    print(f"Ended at: {end.ctime()}")
    elapsed = max(0, int((end - start).total_seconds()))
    print(f"Time elapsed: {_format_remaining(elapsed)}")


def _parse_timer_units(values: List[str]) -> Dict[str, int]:
    units: Dict[str, int] = {}
    names = {"h": "Hours", "m": "Minutes", "s": "Seconds"}
    for unit, raw in zip(values[0::2], values[1::2]):
        if unit not in names:
            raise ValueError(f"Unknown unit '{unit}'")
        if unit in units:
            print(f"{names[unit]} value already initialized, keeping the first one")
            continue
        units[unit] = int(raw)
    return units


@_registry.register("timer", "Countdown timer: timer [h H] [m M] [s S]")
def timer_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    try:
        if not values:
            units = {
                "h": int(input("Enter hours: ")),
                "m": int(input("Enter minutes: ")),
                "s": int(input("Enter seconds: ")),
            }
        elif len(values) % 2 == 0:
            units = _parse_timer_units(values)
        else:
            raise ValueError("unit without a value")
    except (ValueError, EOFError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Usage: timer [<unit> <time_value> ...] (units: h, m, s)", file=sys.stderr)
        return

    remaining = units.get("h", 0) * 3600 + units.get("m", 0) * 60 + units.get("s", 0)
    if remaining < 0:
        print("Timer duration must not be negative", file=sys.stderr)
        return

    print("Timer started!")
    while remaining > 0:
        print(f"\rTimer: {_format_remaining(remaining)}", end="", flush=True)
        time.sleep(1)
        remaining -= 1
    print("\nTimer expired!")


def calculate(expression: str) -> float:
    """Evaluate an expression strictly left to right.

    Supports + - * / with no operator precedence: "2 + 3 * 4" is 20.

    Args:
        expression: Expression text

    Returns:
        Result

    Raises:
        ValueError: If the expression is malformed
        ZeroDivisionError: On division by zero
    """
    match = _FIRST_OPERAND.match(expression)
    if not match:
        raise ValueError(f"Invalid expression: {expression.strip()}")
    result = float(match.group(1))
    pos = match.end()

    while expression[pos:].strip():
        match = _NEXT_TERM.match(expression, pos)
        if not match:
            raise ValueError(f"Invalid operator {expression[pos:].strip()[0]}")
        op, operand = match.group(1), float(match.group(2))
        if op == '+':
            result += operand
        elif op == '-':
            result -= operand
        elif op == '*':
            result *= operand
        else:
            if operand == 0:
                raise ZeroDivisionError("Division by zero!")
            result /= operand
        pos = match.end()

    return result


def _print_calculation(expression: str) -> None:
    try:
        print(f"Result: {calculate(expression):g}")
    except (ValueError, ZeroDivisionError) as e:
        print(f"Error: {e}", file=sys.stderr)


@_registry.register("clc", "Calculator: clc <expression>, or no argument for calculator mode")
def clc_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if values:
        _print_calculation(" ".join(values))
        return

    print("Calculator Mode (Basic Version)")
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        if line.strip() == "exit":
            break
        if line.strip():
            _print_calculation(line)
    print("Exiting Calculator Mode")


@_registry.register("cmd", "Start a nested interpreter session", aliases=("cmd++",))
def cmd_command(arguments: List[Token], context: "ExecutionContext") -> None:
    try:
        code = launch_session(argument_values(arguments), cwd=context.cwd, env=context.environ)
    except OSError as e:
        print(f"Failed to create a new process: {e}", file=sys.stderr)
        return
    logger.debug(f"Nested session exited with code {code}")
