"""
Task execution for the pidmonitor package.

This module provides the managed thread pool that runs sampling tasks in
parallel and joins them.
"""

from .thread_pool import ManagedThreadPoolExecutor, ThreadPoolConfig

__all__ = [
    "ManagedThreadPoolExecutor",
    "ThreadPoolConfig",
]
