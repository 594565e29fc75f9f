"""Reveal files in the platform's file manager."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _reveal_command(path: Path) -> list[str]:
    if sys.platform == "win32":
        return ["explorer", f"/select,{path}"]
    if sys.platform == "darwin":
        return ["open", "-R", str(path)]
    # xdg-open cannot select a file, so open its folder instead
    target = path if path.is_dir() else path.parent
    return ["xdg-open", str(target)]


def reveal_in_file_manager(path: Path) -> bool:
    """Open the file manager with ``path`` selected (or its folder on Linux).

    The file manager is started detached and never waited for.

    Returns:
        True if the file manager process was launched
    """
    command = _reveal_command(path)
    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning(f"File manager command not found: {command[0]}")
        return False
    except OSError as e:
        logger.warning(f"Failed to reveal {path}: {e}")
        return False

    logger.debug(f"Revealed {path} with {command[0]}")
    return True
