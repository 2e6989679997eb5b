"""
Command execution utilities.

This module provides the helper used to run short external commands (such
as ``pgrep``) and capture their output.
"""

import logging
import shutil
import subprocess
from typing import List, Tuple

logger = logging.getLogger(__name__)


def run_command(command: List[str]) -> Tuple[int, str, str]:
    """Execute a command and capture its output.

    Args:
        command: The command and its arguments.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 when the command could not be executed at all.

    Note:
        Uses UTF-8 decoding with error replacement for robust text handling.
    """
    logger.debug(f"Executing command: {command}")
    try:
        process = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {command[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{command[0]}'"
    except OSError as e:
        logger.error(f"Failed to run command {command}: {type(e).__name__}: {e}")
        return -1, "", f"An unexpected error occurred: {e}"


def check_pgrep_installed() -> bool:
    """Check if the 'pgrep' command is available on the system."""
    return shutil.which("pgrep") is not None
