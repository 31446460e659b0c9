"""File system commands: cd, copy, comp, quicksearch, schema."""

from __future__ import annotations

import logging
import os
import re
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Set

from cmdpp.shell.builtins import get_registry
from cmdpp.shell.parser import Token, argument_values

if TYPE_CHECKING:
    from cmdpp.shell.interpreter import ExecutionContext

logger = logging.getLogger(__name__)

_registry = get_registry()

INCLUDE_DIRECTIVE = re.compile(r'#include\s+["<]([^">]+)[">]')


@_registry.register("cd", "Change the current directory")
def cd_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 1:
        print(f"Current directory: {context.cwd}")
        print("Usage: cd <directory>", file=sys.stderr)
        return
    try:
        context.change_directory(values[0])
    except OSError as e:
        print(str(e), file=sys.stderr)


def _copy_file(source: Path, destination: Path) -> bool:
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        print(f"Error copying {source} to {destination}: {e.strerror or e}", file=sys.stderr)
        return False
    logger.debug(f"Copied {source} -> {destination}")
    print("File copied successfully.")
    return True


@_registry.register("copy", "Copy files: copy <source>... <destination>")
def copy_command(arguments: List[Token], context: "ExecutionContext") -> None:
    """Copy one file, several files into a directory, or a directory's files.

    Args:
        arguments: Sources followed by the destination
        context: Session state
    """
    values = argument_values(arguments)
    if len(values) < 2:
        print("Usage: copy <source>... <destination>", file=sys.stderr)
        return

    sources = [context.resolve_path(v) for v in values[:-1]]
    destination = context.resolve_path(values[-1])

    if len(sources) == 1 and sources[0].is_dir():
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Error creating {destination}: {e.strerror or e}", file=sys.stderr)
            return
        for entry in sorted(sources[0].iterdir()):
            if entry.is_file():
                _copy_file(entry, destination / entry.name)
        return

    if len(sources) > 1:
        if not destination.is_dir():
            print(f"Destination is not a directory: {values[-1]}", file=sys.stderr)
            return
        for source in sources:
            _copy_file(source, destination / source.name)
        return

    source = sources[0]
    if destination.is_dir():
        destination = destination / source.name
    _copy_file(source, destination)


def first_difference(data1: bytes, data2: bytes) -> Optional[int]:
    """Find the first offset where two byte strings differ.

    Returns:
        Offset, or None if the shared prefix is identical
    """
    for offset, (a, b) in enumerate(zip(data1, data2)):
        if a != b:
            return offset
    return None


@_registry.register("comp", "Compare two files", aliases=("fc",))
def comp_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 2:
        print("Usage: comp <file1> <file2>", file=sys.stderr)
        return
    try:
        data1 = context.resolve_path(values[0]).read_bytes()
        data2 = context.resolve_path(values[1]).read_bytes()
    except OSError as e:
        logger.debug(f"comp: {e}")
        print("Error opening files.", file=sys.stderr)
        return

    if len(data1) != len(data2):
        print("Files have different sizes.")
        return
    offset = first_difference(data1, data2)
    if offset is not None:
        print(f"Files differ at offset {offset}.")
    else:
        print("Files are identical.")


def search_files(directory: Path, pattern: str) -> List[Path]:
    """Search a directory tree for files.

    A pattern starting with '.' matches by extension; anything else must
    equal the file name.

    Args:
        directory: Root directory
        pattern: File name or extension

    Returns:
        Matching paths, sorted
    """
    by_extension = pattern.startswith('.')
    matches: List[Path] = []
    for root, _dirs, files in os.walk(directory):
        for name in files:
            if by_extension:
                if len(name) > len(pattern) and name.endswith(pattern):
                    matches.append(Path(root) / name)
            elif name == pattern:
                matches.append(Path(root) / name)
    return sorted(matches)


@_registry.register(
    "quicksearch",
    "Find files: qs <directory> <file_name | .extension>",
    aliases=("qs",)
)
def quicksearch_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 2:
        print("Usage: qs <search_directory> <file_name | .extension>", file=sys.stderr)
        return
    directory = context.resolve_path(values[0])
    if not directory.is_dir():
        print(f"Invalid directory: {values[0]}", file=sys.stderr)
        return

    matches = search_files(directory, values[1])
    for path in matches:
        print(path)
    if not matches:
        print("No matching files found.")


def render_folder_tree(directory: Path) -> List[str]:
    """Render a directory as a box-drawing tree.

    Args:
        directory: Root directory

    Returns:
        Lines, root first
    """
    lines = [str(directory)]
    _render_folder(directory, "", lines)
    return lines


def _render_folder(directory: Path, prefix: str, lines: List[str]) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name.lower())
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return
    for index, entry in enumerate(entries):
        last = index == len(entries) - 1
        is_dir = entry.is_dir() and not entry.is_symlink()
        lines.append(f"{prefix}{'└── ' if last else '├── '}{entry.name}{'/' if is_dir else ''}")
        if is_dir:
            _render_folder(entry, prefix + ("    " if last else "│   "), lines)


def render_dependency_tree(entry_file: Path) -> List[str]:
    """Render the #include tree of a source file.

    Included files are looked up relative to the including file; each
    file appears once.

    Args:
        entry_file: Source file to start from

    Returns:
        Lines, header first

    Raises:
        OSError: If the entry file cannot be read
    """
    includes = _read_includes(entry_file)
    lines = ["Dependency Tree:", f"|-- {entry_file.name}"]
    visited: Set[Path] = {entry_file.resolve()}
    for include in includes:
        _render_dependency(entry_file.parent / include, include, 1, visited, lines)
    return lines


def _read_includes(path: Path) -> List[str]:
    with open(path, errors="replace") as f:
        return [m.group(1) for m in map(INCLUDE_DIRECTIVE.search, f) if m]


def _render_dependency(path: Path, display: str, depth: int, visited: Set[Path], lines: List[str]) -> None:
    key = path.resolve()
    if key in visited:
        return
    visited.add(key)
    lines.append(f"{'  ' * depth}|-- {display}")
    if not path.is_file():
        return
    try:
        includes = _read_includes(path)
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return
    for include in includes:
        _render_dependency(path.parent / include, include, depth + 1, visited, lines)


@_registry.register("schema", "Render trees: schema folder <path> | schema dependency <file>")
def schema_command(arguments: List[Token], context: "ExecutionContext") -> None:
    values = argument_values(arguments)
    if len(values) != 2 or values[0] not in ("folder", "dependency"):
        print("Usage: schema folder <folder_path> | schema dependency <entry_file_path>", file=sys.stderr)
        return

    target = context.resolve_path(values[1])
    if values[0] == "folder":
        if not target.exists():
            print("Path does not exist.", file=sys.stderr)
            return
        if not target.is_dir():
            print("Provided path is not a folder.", file=sys.stderr)
            return
        print("\n".join(render_folder_tree(target)))
        return

    try:
        lines = render_dependency_tree(target)
    except OSError:
        print(f"Error: Failed to open file {values[1]}", file=sys.stderr)
        return
    print("\n".join(lines))
