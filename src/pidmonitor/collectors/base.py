"""
Defines the base class for per-process samplers.

This module provides:
- ConsoleEcho: serialized line output to the operator's console.
- AbstractSampler: an abstract base class (ABC) that defines the interface of
  all sampler backends (pidstat, psutil) and the capture loop they share.
"""

import logging
import sys
import threading
from abc import ABC, abstractmethod
from typing import IO, Iterable, Optional

from ..models.runtime import SamplingTask

logger = logging.getLogger(__name__)


class ConsoleEcho:
    """
    Writes sampler lines to a stream, one whole line at a time.

    Lines from parallel sampling tasks never interleave mid-line.
    """

    def __init__(self, stream: Optional[IO[str]] = None, enabled: bool = True):
        self.stream = stream
        self.enabled = enabled
        self._lock = threading.Lock()

    def write_line(self, line: str) -> None:
        if not self.enabled:
            return
        stream = self.stream or sys.stdout
        text = line if line.endswith("\n") else line + "\n"
        with self._lock:
            stream.write(text)
            stream.flush()


class AbstractSampler(ABC):
    """
    Abstract base class for samplers.

    A sampler produces pidstat-formatted text lines for one (process, metric)
    task. The shared `run` loop appends each line to the task's capture file
    as soon as it arrives and echoes it to the console.
    """

    name: str = "abstract"

    def __init__(self, task: SamplingTask, console: Optional[ConsoleEcho] = None, **kwargs):
        """
        Initializes the AbstractSampler.

        Args:
            task: The (process, metric) task to sample.
            console: Where captured lines are echoed; None disables echoing.
            **kwargs: Additional keyword arguments specific to a backend.
        """
        self.task = task
        self.console = console
        self.sampler_kwargs = kwargs
        logger.debug(
            f"Initializing {self.__class__.__name__} for PID {task.process_id} "
            f"({task.metric}), {task.sample_count} samples every {task.interval_seconds}s"
        )

    @abstractmethod
    def iter_lines(self) -> Iterable[str]:
        """
        Yield sampler output lines as they are produced.

        The generator ends when the sampler has reported `task.sample_count`
        intervals or when the target process has exited.
        """

    def stop(self) -> None:
        """Release any resources held by the backend. Safe to call repeatedly."""

    def run(self) -> int:
        """
        Sample the task to completion.

        Returns:
            The number of lines written to the capture file.
        """
        lines_written = 0
        logger.info(
            f"Sampling {self.task.metric} of PID {self.task.process_id} with {self.name} "
            f"-> {self.task.output_file.name}"
        )
        try:
            with open(self.task.output_file, "a", encoding="utf-8") as capture:
                for line in self.iter_lines():
                    text = line.rstrip("\n")
                    capture.write(text + "\n")
                    capture.flush()
                    lines_written += 1
                    if self.console is not None:
                        self.console.write_line(text)
        finally:
            self.stop()
        logger.debug(
            f"{self.name} sampler for PID {self.task.process_id} ({self.task.metric}) "
            f"finished after {lines_written} lines"
        )
        return lines_written
