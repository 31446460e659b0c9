"""External process launching.

Starts executables found on disk and waits for them. Output goes straight
to the terminal; nothing is captured.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


def is_executable(
    path: Path,
    extensions: Iterable[str],
    script_extension: Optional[str] = None
) -> bool:
    """Check if a path names a file that can be launched directly.

    A regular file qualifies when its suffix is one of ``extensions``. On
    POSIX a file with the execute permission bit also qualifies, unless it
    carries the script extension.

    Args:
        path: Candidate file
        extensions: Executable extensions (lowercase, with leading dot)
        script_extension: Interpreter script extension, never launched

    Returns:
        True if the file can be launched
    """
    if not path.is_file():
        return False
    suffix = path.suffix.lower()
    if suffix in set(extensions):
        return True
    if script_extension and suffix == script_extension:
        return False
    return os.name == "posix" and os.access(path, os.X_OK)


def launch_executable(
    path: Path,
    arguments: Sequence[str] = (),
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None
) -> int:
    """Run an executable and block until it exits.

    Args:
        path: Executable file
        arguments: Extra command-line arguments
        cwd: Working directory for the child
        env: Environment for the child (inherits when None)

    Returns:
        Child exit code

    Raises:
        OSError: If the process cannot be started
    """
    cmd = [str(path), *arguments]
    logger.debug(f"Launching: {' '.join(cmd)}")
    result = subprocess.run(
        cmd,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        check=False
    )
    if result.returncode != 0:
        logger.debug(f"{path.name} exited with code {result.returncode}")
    return result.returncode


def launch_session(
    extra_args: Sequence[str] = (),
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None
) -> int:
    """Start a nested interpreter session in a child process and wait for it.

    Args:
        extra_args: Extra cmdpp command-line arguments
        cwd: Working directory for the child
        env: Environment for the child (inherits when None)

    Returns:
        Child exit code

    Raises:
        OSError: If the process cannot be started
    """
    cmd: List[str] = [sys.executable, "-m", "cmdpp", *extra_args]
    logger.debug(f"Starting nested session: {' '.join(cmd)}")
    result = subprocess.run(
        cmd,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        check=False
    )
    return result.returncode
