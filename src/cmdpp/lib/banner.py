"""Start-up banner rendering.

Types a banner (usually the license text) character by character, the way
the interpreter greets the user on start and after ``cls``.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

logger = logging.getLogger(__name__)


def type_text(
    path: Union[str, Path],
    delay_ms: int = 25,
    stream: Optional[TextIO] = None,
    sleep: Callable[[float], None] = time.sleep
) -> bool:
    """Print a file's content one character at a time.

    Args:
        path: Text file to render
        delay_ms: Pause between characters in milliseconds
        stream: Output stream (default: stdout)
        sleep: Sleep function, replaceable in tests

    Returns:
        True if the file was rendered, False if it could not be read
    """
    out = stream or sys.stdout
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Banner not rendered: {e}")
        print(f"Error: Unable to open file {path}", file=sys.stderr)
        return False

    delay = delay_ms / 1000.0
    for char in text:
        out.write(char)
        out.flush()
        if delay:
            sleep(delay)

    out.write("\n\n")
    out.flush()
    return True
