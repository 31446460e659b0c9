"""Script file model.

A script is a plain text file. Lines outside any section run once, in
order, when the script is invoked. Sections are delimited by marker lines
and only run when reached through ``goto``::

    echo start
    goto greet
    /-greet
    echo hello
    greet-/

Sections do not nest: while one is open, only its own end marker closes
it and every other line (another start marker included) is body content.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

SECTION_START = re.compile(r"/-(\w+)")
SECTION_END = re.compile(r"(\w+)-/")


@dataclass
class Script:
    """Parsed script: top-level lines plus named section bodies."""

    path: Optional[Path] = None
    lines: List[str] = field(default_factory=list)
    sections: Dict[str, List[str]] = field(default_factory=dict)

    def get_section(self, name: str) -> Optional[List[str]]:
        """Get the body lines of a section, None if undefined."""
        return self.sections.get(name)

    def is_empty(self) -> bool:
        """Check if the script has nothing to run or jump to."""
        return not self.lines and not self.sections


class ScriptParser:
    """Line-oriented parser for section-based scripts."""

    def __init__(self):
        """Initialize parser."""
        self._current: Optional[str] = None
        self._body: List[str] = []

    def parse_lines(self, raw_lines: Iterable[str], path: Optional[Path] = None) -> Script:
        """Parse already-read lines into a script.

        Args:
            raw_lines: Lines of text, with or without trailing newlines
            path: Source path, kept for messages

        Returns:
            Parsed script
        """
        script = Script(path=path)
        self._current = None
        self._body = []

        for raw in raw_lines:
            line = raw.rstrip("\r\n")
            marker = line.strip()

            if self._current is None:
                start = SECTION_START.fullmatch(marker)
                if start:
                    self._current = start.group(1)
                    self._body = []
                    continue
                script.lines.append(line)
                continue

            end = SECTION_END.fullmatch(marker)
            if end and end.group(1) == self._current:
                if self._current in script.sections:
                    logger.debug(f"Section '{self._current}' redefined, keeping the last definition")
                script.sections[self._current] = self._body
                self._current = None
                self._body = []
                continue

            self._body.append(line)

        if self._current is not None:
            logger.warning(
                f"Section '{self._current}' in {path or '<script>'} is never closed; "
                f"dropping {len(self._body)} line(s)"
            )
            self._current = None
            self._body = []

        return script

    def parse(self, path: Union[str, Path]) -> Script:
        """Parse a script file.

        An unreadable file is reported and yields an empty script. Bytes
        that are not valid UTF-8 are replaced, never rejected.

        Args:
            path: Path to the script file

        Returns:
            Parsed script
        """
        script_path = Path(path)
        try:
            with open(script_path, encoding="utf-8", errors="replace", newline="") as f:
                return self.parse_lines(f, path=script_path)
        except OSError as e:
            logger.error(f"Unable to open script {script_path}: {e}")
            print(f"Unable to open the file: {script_path}", file=sys.stderr)
            return Script(path=script_path)


def parse_script(path: Union[str, Path]) -> Script:
    """Parse a script file.

    Convenience function that creates a parser and parses the file.

    Args:
        path: Path to the script file

    Returns:
        Parsed script (empty if the file cannot be read)
    """
    return ScriptParser().parse(path)
