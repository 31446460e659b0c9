"""Binary file commands: hexdump, findstr, encoding."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, List

from cmdpp.shell.builtins import get_registry
from cmdpp.shell.parser import Token, argument_values

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

_registry = get_registry()

HEXDUMP_WIDTH = 16
DEFAULT_HEXDUMP_FILE = "hexdump.txt"
DEFAULT_STRINGS_FILE = "extracted_str.txt"

_STRING_CONTROL = frozenset(b"\r\n\t")


def _is_printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7e


def format_hexdump(data: bytes, width: int = HEXDUMP_WIDTH) -> List[str]:
    """Format bytes as hex rows with an ASCII column.

    Each row holds ``width`` bytes as two-digit hex, then ``  | `` and the
    same bytes as text with non-printable bytes shown as '.'. A short final
    row is padded so the ASCII column lines up.

    Args:
        data: Bytes to dump
        width: Bytes per row

    Returns:
        Rows
    """
    rows = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        hex_part = "".join(f"{b:02x} " for b in chunk).ljust(width * 3)
        ascii_part = "".join(chr(b) if _is_printable(b) else '.' for b in chunk)
        rows.append(f"{hex_part}  | {ascii_part}")
    return rows


def extract_strings(data: bytes) -> List[str]:
    """Extract runs of printable characters from binary data.

    Carriage return, newline and tab count as printable.

    Args:
        data: Raw bytes

    Returns:
        Runs in file order
    """
    strings = []
    current = bytearray()
    for byte in data:
        if _is_printable(byte) or byte in _STRING_CONTROL:
            current.append(byte)
        elif current:
            strings.append(current.decode("ascii"))
            current.clear()
    if current:
        strings.append(current.decode("ascii"))
    return strings


def xor_bytes(data: bytes, key: bytes) -> bytes:
    """XOR data with a repeating key.

    Raises:
        ValueError: If the key is empty
    """
    if not key:
        raise ValueError("Key must not be empty")
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(data))


@_registry.register("hexdump", "Hex dump a file: hexdump <file> [-sf [output]]")
def hexdump_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    to_file = len(values) in (2, 3) and values[1] == "-sf"
    if len(values) != 1 and not to_file:
        print("Usage: hexdump <file> [-sf [output_file]]", file=sys.stderr)
        return

    try:
        data = context.resolve_path(values[0]).read_bytes()
    except OSError as e:
        logger.debug(f"hexdump: {e}")
        print(f"Error: Unable to open file {values[0]}", file=sys.stderr)
        return

    rows = format_hexdump(data)
    if not to_file:
        print(f"Hexadecimal dump of file: {values[0]}")
        print("\n".join(rows))
        return

    output = context.resolve_path(values[2] if len(values) == 3 else DEFAULT_HEXDUMP_FILE)
    try:
        with open(output, 'w') as f:
            f.write(f"Hexadecimal dump of file: {values[0]}\n")
            f.writelines(row + "\n" for row in rows)
    except OSError as e:
        print(f"Error: Unable to write file {output}: {e.strerror or e}", file=sys.stderr)
        return
    print(f"Hexadecimal dump saved to: {output}")


@_registry.register("findstr", "Extract printable strings: findstr <file> [output]")
def findstr_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) not in (1, 2):
        print("Usage: findstr <file> [output_file]", file=sys.stderr)
        return

    try:
        data = context.resolve_path(values[0]).read_bytes()
    except OSError as e:
        logger.debug(f"findstr: {e}")
        print(f"Error: Unable to open file {values[0]}", file=sys.stderr)
        return

    strings = extract_strings(data)
    output = context.resolve_path(values[1] if len(values) == 2 else DEFAULT_STRINGS_FILE)
    try:
        with open(output, 'w', newline="") as f:
            f.write("Extracted Strings:\n")
            f.writelines(s + "\n" for s in strings)
    except OSError as e:
        print(f"Error: Unable to write file {output}: {e.strerror or e}", file=sys.stderr)
        return
    print(f"Extracted {len(strings)} string(s) to: {output}")


@_registry.register(
    "encoding",
    "XOR file encoding: encoding xor encrypt|decrypt <input> <output> <key>"
)
def encoding_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 5 or values[0] != "xor" or values[1] not in ("encrypt", "decrypt"):
        print(
            "Usage: encoding xor encrypt|decrypt <input_file> <output_file> <key>",
            file=sys.stderr
        )
        return

    mode, source, target, key = values[1:]
    try:
        data = context.resolve_path(source).read_bytes()
    except OSError as e:
        logger.debug(f"encoding: {e}")
        print(f"Error: Unable to open file {source}", file=sys.stderr)
        return

    try:
        result = xor_bytes(data, key.encode("utf-8"))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return

    output = context.resolve_path(target)
    try:
        output.write_bytes(result)
    except OSError as e:
        print(f"Error: Unable to write file {target}: {e.strerror or e}", file=sys.stderr)
        return

    if mode == "encrypt":
        print(f"File encrypted successfully. Encrypted file saved at: {target}")
    else:
        print(f"File decrypted successfully. Decrypted file saved at: {target}")
