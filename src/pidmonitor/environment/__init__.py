"""
Node environment management (init, del, copy).
"""

from .manager import COMMANDS, EnvironmentManager

__all__ = [
    "COMMANDS",
    "EnvironmentManager",
]
