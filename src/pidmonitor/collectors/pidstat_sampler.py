"""
Sampler implementation using the 'pidstat' command-line utility.

This module provides the PidstatSampler class, which runs `pidstat` (part of
the sysstat package) against a single process identifier and passes its
output through line by line.
"""

import logging
import os
import subprocess
import threading
from typing import IO, Any, Iterable, List, Optional

from ..models.runtime import CPU_METRIC, MEMORY_METRIC
from .base import AbstractSampler

logger = logging.getLogger(__name__)


class PidstatSampler(AbstractSampler):
    """
    Samples CPU (`-u`) or memory (`-r`) statistics of one process with pidstat.

    Attributes:
        METRIC_FLAGS: pidstat report flag for each metric.
        pidstat_proc: The subprocess.Popen object for the running pidstat command.
    """

    name = "pidstat"

    METRIC_FLAGS = {
        CPU_METRIC: "-u",
        MEMORY_METRIC: "-r",
    }

    def __init__(self, task, console=None, **kwargs):
        """
        Args:
            task: The (process, metric) task to sample.
            console: Where captured lines are echoed.
            **kwargs: Additional keyword arguments.
                      Expected: "shutdown_timeout" (float) seconds to wait for
                      pidstat after SIGTERM.
        """
        super().__init__(task, console, **kwargs)
        if task.metric not in self.METRIC_FLAGS:
            raise ValueError(f"Unknown metric for pidstat: {task.metric}")
        self.shutdown_timeout: float = kwargs.get("shutdown_timeout", 5.0)
        self.pidstat_proc: Optional[subprocess.Popen] = None
        self._stop_event = threading.Event()

    def build_command(self) -> List[str]:
        """
        Returns the pidstat argument vector, e.g.
        ``pidstat -p 1234 -u 1 60``.
        """
        return [
            "pidstat",
            "-p",
            str(self.task.process_id),
            self.METRIC_FLAGS[self.task.metric],
            str(self.task.interval_seconds),
            str(self.task.sample_count),
        ]

    def start(self) -> None:
        """
        Starts the `pidstat` subprocess.

        `LC_ALL=C` keeps the time column in 24-hour format and the decimal
        separator a dot, which the output parser relies on.

        Raises:
            RuntimeError: If `pidstat` fails to start.
        """
        command = self.build_command()

        pidstat_env = os.environ.copy()
        pidstat_env["LC_ALL"] = "C"

        logger.debug(f"Starting pidstat with command: {' '.join(command)}")
        try:
            self.pidstat_proc = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                # Discard stderr to prevent pipe buffer issues.
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
                env=pidstat_env,
            )
        except OSError as e:
            logger.error(f"Failed to start pidstat: {e}", exc_info=True)
            raise RuntimeError(f"Failed to start pidstat process: {e}") from e

    def iter_lines(self) -> Iterable[str]:
        """
        Yields pidstat stdout lines until pidstat exits.

        pidstat exits by itself after `sample_count` reports, or earlier when
        the target process disappears.
        """
        if self._stop_event.is_set():
            return
        self.start()
        if self._stop_event.is_set():
            # stop() ran while pidstat was starting; run() stops it on exit.
            return
        # stop() may clear self.pidstat_proc from another thread.
        proc = self.pidstat_proc
        stdout: Optional[IO[Any]] = proc.stdout
        if stdout is None:
            logger.warning("pidstat stdout not available for reading samples.")
            return

        try:
            for line in iter(stdout.readline, ""):
                yield line
        except ValueError:
            # stdout was closed by stop().
            return

        return_code = proc.wait()
        if return_code != 0:
            logger.warning(
                f"pidstat for PID {self.task.process_id} ({self.task.metric}) "
                f"exited with code {return_code}"
            )

    def stop(self) -> None:
        """
        Stops the `pidstat` subprocess if it is still running.

        Terminates gracefully (SIGTERM), with a fallback to SIGKILL if it does
        not exit within `shutdown_timeout`.
        """
        self._stop_event.set()
        proc = self.pidstat_proc
        if proc is None:
            return
        if proc.poll() is None:
            logger.info(f"Stopping pidstat process (PID: {proc.pid})...")
            proc.terminate()
            try:
                proc.wait(timeout=self.shutdown_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(
                    f"pidstat process (PID: {proc.pid}) did not terminate gracefully, killing..."
                )
                proc.kill()
                proc.wait()
        if proc.stdout is not None:
            proc.stdout.close()
        self.pidstat_proc = None
