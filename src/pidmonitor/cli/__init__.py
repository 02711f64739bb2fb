"""
Command-line interface for the pidmonitor package.

This module provides the ``pidmonitor`` and ``pidmonitor-env`` entry points.
"""

from .main import env_cli, main_cli

__all__ = [
    "env_cli",
    "main_cli",
]
