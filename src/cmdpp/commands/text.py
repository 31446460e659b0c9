"""Text commands: rem (regex match count) and xml (attribute rewrite)."""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Tuple

from cmdpp.shell.builtins import get_registry
from cmdpp.shell.parser import Token, argument_values

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

_registry = get_registry()


def count_matches(text: str, pattern: str) -> int:
    """Count non-overlapping regex matches.

    Raises:
        re.error: If the pattern is invalid
    """
    return sum(1 for _ in re.finditer(pattern, text))


def rewrite_parameter(text: str, param: str, value: str) -> Tuple[str, int]:
    """Set every ``param="..."`` assignment in text to a new value.

    Args:
        text: XML text
        param: Attribute name
        value: New attribute value

    Returns:
        (new text, number of replacements)
    """
    pattern = re.compile(rf'{re.escape(param)}\s*=\s*"[^"]*"')
    replacement = f'{param}="{value}"'
    return pattern.subn(lambda _: replacement, text)


def rewrite_xml_folder(folder: Path, param: str, value: str) -> int:
    """Rewrite an attribute in every .xml file below a folder.

    Files without a match are left untouched.

    Returns:
        Total replacements
    """
    total = 0
    for path in sorted(folder.rglob("*.xml")):
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Unable to read {path}: {e}", file=sys.stderr)
            continue
        new_text, count = rewrite_parameter(text, param, value)
        if count:
            path.write_text(new_text, encoding="utf-8")
            logger.debug(f"{path}: {count} occurrence(s) modified")
        total += count
    return total


@_registry.register("rem", "Count regex matches in a file: rem <file> <regex>")
def rem_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 2:
        print("Usage: rem <file> <regex>", file=sys.stderr)
        return

    try:
        text = context.resolve_path(values[0]).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"rem: {e}")
        print("Error opening file!", file=sys.stderr)
        return

    try:
        count = count_matches(text, values[1])
    except re.error as e:
        print(f"Invalid regular expression: {e}", file=sys.stderr)
        return
    print(f"Number of matches: {count}")


@_registry.register("xml", "Rewrite XML attributes: xml cp <folder> <param> <value>")
def xml_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 4 or values[0] != "cp":
        print("Usage: xml cp <folder> <param> <value>", file=sys.stderr)
        return

    folder = context.resolve_path(values[1])
    if not folder.is_dir():
        print(f"Invalid directory: {values[1]}", file=sys.stderr)
        return

    total = rewrite_xml_folder(folder, values[2], values[3])
    print(f"Total occurrences modified: {total}")
