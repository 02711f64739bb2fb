"""
Process liveness checks.
"""

import logging
from typing import Iterable, List, Tuple

import psutil

logger = logging.getLogger(__name__)


def is_process_alive(pid: int) -> bool:
    """Return True if a process with this identifier exists, zombies included."""
    if not psutil.pid_exists(pid):
        return False
    try:
        psutil.Process(pid)
    except psutil.ZombieProcess:
        return True
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Exists but belongs to another user; pidstat can still read /proc for it.
        return True
    return True


def validate_targets(process_ids: Iterable[int]) -> Tuple[List[int], List[int]]:
    """Split requested identifiers into live and skipped ones.

    The check runs once. Duplicates are collapsed onto their first occurrence
    so that each live process is sampled exactly once.

    Args:
        process_ids: Requested identifiers in command-line order.

    Returns:
        Tuple of (live_ids, skipped_ids), both in request order.
    """
    live_ids: List[int] = []
    skipped_ids: List[int] = []
    for pid in process_ids:
        if pid in live_ids or pid in skipped_ids:
            continue
        if is_process_alive(pid):
            live_ids.append(pid)
        else:
            logger.warning(f"PID {pid} not found. Skipping.")
            skipped_ids.append(pid)
    return live_ids, skipped_ids
