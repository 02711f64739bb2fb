"""
Thread pool for sampling tasks.

Every (process, metric) sampling task gets its own worker so that all tasks
start together, and the pool offers a single join barrier that returns once
every submitted task has finished.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


@dataclass
class ThreadPoolConfig:
    """Configuration for the sampling thread pool."""

    max_workers: int = 2
    thread_name_prefix: str = "SamplerWorker"


class ManagedThreadPoolExecutor:
    """
    ThreadPoolExecutor wrapper with lifecycle checks, task statistics and a
    join-all barrier.
    """

    def __init__(self, config: ThreadPoolConfig):
        """
        Initialize the managed thread pool executor.

        Args:
            config: Thread pool configuration
        """
        self.config = config
        self.executor: Optional[ThreadPoolExecutor] = None
        self.is_shutdown = False
        self._lock = threading.Lock()

        self.stats = {
            "tasks_submitted": 0,
            "tasks_completed": 0,
            "tasks_failed": 0,
        }
    def start(self) -> None:
        """
        Start the thread pool executor.

        Raises:
            RuntimeError: If already started
        """
        if self.executor is not None:
            raise RuntimeError("Thread pool already started")

        self.executor = ThreadPoolExecutor(
            max_workers=max(1, self.config.max_workers),
            thread_name_prefix=self.config.thread_name_prefix,
        )
        self.is_shutdown = False
        logger.debug(f"Started thread pool with {self.config.max_workers} workers")

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Submit a task to the thread pool.

        Returns:
            Future representing the task

        Raises:
            RuntimeError: If executor is not started or is shutdown
        """
        if self.executor is None:
            raise RuntimeError("Thread pool not started")
        if self.is_shutdown:
            raise RuntimeError("Thread pool is shutdown")

        with self._lock:
            self.stats["tasks_submitted"] += 1

        future = self.executor.submit(fn, *args, **kwargs)
        future.add_done_callback(self._task_completed)
        return future

    def wait_all(self, futures: List[Future], timeout: Optional[float] = None) -> bool:
        """
        Block until every future has finished.

        A failing task does not cut the wait short; its exception stays on
        its future for the caller to inspect.

        Args:
            futures: The futures to wait for
            timeout: Maximum seconds to wait, None for no limit

        Returns:
            True if all futures finished, False on timeout
        """
        done, not_done = wait(futures, timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} tasks still running after {timeout}s")
        return not not_done

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Shutdown the thread pool executor.

        Args:
            wait: Whether to wait for completion
            cancel_futures: Whether to cancel pending futures
        """
        if self.executor is None or self.is_shutdown:
            return

        try:
            self.is_shutdown = True
            self.executor.shutdown(wait=wait, cancel_futures=cancel_futures)
            logger.debug("Thread pool shutdown completed" if wait else "Thread pool shutdown initiated")
        except Exception as e:
            handle_error(
                error=e,
                context="shutting down thread pool",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
        finally:
            self.executor = None

    def get_stats(self) -> Dict[str, Any]:
        """
        Get task counters. They are final once shutdown(wait=True) has returned.
        """
        with self._lock:
            stats = self.stats.copy()
        stats["is_shutdown"] = self.is_shutdown
        return stats

    def _task_completed(self, future: Future) -> None:
        """
        Callback executed when a task completes.
        """
        with self._lock:
            if future.cancelled():
                return
            if future.exception() is not None:
                self.stats["tasks_failed"] += 1
            else:
                self.stats["tasks_completed"] += 1

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown(wait=True, cancel_futures=exc_type is not None)
