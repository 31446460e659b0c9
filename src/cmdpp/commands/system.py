"""System commands: envvar, kill, gpw, random."""

from __future__ import annotations

import logging
import os
import random
import secrets
import signal
import string
import sys
from typing import TYPE_CHECKING, List

from cmdpp.shell.builtins import get_registry
from cmdpp.shell.parser import Token, argument_values

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

_registry = get_registry()

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*()-_=+[]{}|;:'\",.<>?/"


def generate_password(length: int) -> str:
    """Generate a random password.

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError("Password length must be greater than 0.")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def generate_random_number(length: int) -> str:
    """Generate a random number with exactly ``length`` digits.

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError("Length must be greater than 0.")
    first = str(random.randint(1, 9))
    return first + "".join(str(random.randint(0, 9)) for _ in range(length - 1))


def _prompt(label: str) -> str:
    return input(f"Enter {label}: ").strip()


@_registry.register("envvar", "Environment variables: envvar set|get|unset <name> [value]")
def envvar_command(arguments: List[Token], context: "ExecutionContext") -> None:
    """Manage environment variables of the session.

    Missing names or values are prompted for.

    Args:
        arguments: Action, name and (for set) value
        context: Session state (provides the environment)
    """
    values = argument_values(arguments)
    if not values or values[0] not in ("set", "get", "unset"):
        print("Usage: envvar set <name> <value> | get <name> | unset <name>", file=sys.stderr)
        return

    action = values[0]
    environ = context.environ
    try:
        name = values[1] if len(values) > 1 else _prompt("variable name")
        if action == "set":
            value = " ".join(values[2:]) if len(values) > 2 else _prompt("variable value")
    except EOFError:
        print()
        return

    if action == "set":
        if name in environ:
            print(f"Environment variable {name} already exists", file=sys.stderr)
            return
        environ[name] = value
        print(f"Environment variable {name} set to: {value}")
    elif action == "get":
        if name in environ:
            print(f"Value of environment variable {name}: {environ[name]}")
        else:
            print(f"Environment variable {name} not found")
    else:
        if name not in environ:
            print(f"Environment variable {name} doesn't exist")
            return
        del environ[name]
        print(f"Environment variable {name} unset successfully")


@_registry.register("kill", "Terminate a process: kill <pid>")
def kill_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 1:
        print("Usage: kill <pid>", file=sys.stderr)
        return
    try:
        pid = int(values[0])
    except ValueError:
        print(f"Invalid PID: {values[0]}", file=sys.stderr)
        return

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        print(f"Failed to open process with PID {pid}", file=sys.stderr)
        return
    except PermissionError:
        print(f"Failed to terminate process with PID {pid}", file=sys.stderr)
        return
    logger.debug(f"Sent SIGTERM to {pid}")
    print(f"Process with PID {pid} terminated successfully.")


@_registry.register("gpw", "Generate a password: gpw <length>")
def gpw_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 1:
        print("Usage: gpw <password_length>", file=sys.stderr)
        return
    try:
        password = generate_password(int(values[0]))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return
    print(f"Generated Password: {password}")


@_registry.register("random", "Random values: random number <length> | random coin")
def random_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if values == ["coin"]:
        print(f"The coin landed on: {random.choice(('heads', 'tails'))}")
        return
    if len(values) != 2 or values[0] != "number":
        print("Usage: random number <length> | random coin", file=sys.stderr)
        return
    try:
        length = int(values[1])
        number = generate_random_number(length)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return
    print(f"Random number of length {length}: {number}")
