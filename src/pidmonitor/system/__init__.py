"""
System interaction utilities.

- Command execution with error handling and logging
- Sampler dependency detection
- Process liveness checks
"""

from .commands import check_pidstat_installed, run_command
from .processes import is_process_alive, validate_targets

__all__ = [
    "check_pidstat_installed",
    "run_command",
    "is_process_alive",
    "validate_targets",
]
