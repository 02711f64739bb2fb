"""
Command execution utilities.

This module provides functions for executing external binaries and checking
for system dependencies.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def run_command(
    command: List[str], cwd: Optional[Path] = None
) -> Tuple[int, str, str]:
    """Execute a command and capture its output.

    Args:
        command: The argument vector to execute.
        cwd: Working directory path for command execution.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 when the command could not be started.

    Note:
        Uses UTF-8 encoding with error replacement for robust text handling.
    """
    logger.debug(f"Executing command: '{' '.join(command)}' in '{cwd}'")
    try:
        process = subprocess.run(
            command,
            cwd=cwd,
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
        logger.error(
            f"Could not execute '{command[0]}': {type(e).__name__}: {e}", exc_info=True
        )
        return -1, "", f"Error: Could not execute '{command[0]}': {e}"


def check_pidstat_installed() -> bool:
    """Check if the 'pidstat' command is available on the system.

    Note:
        pidstat is part of the sysstat package.
    """
    return shutil.which("pidstat") is not None
