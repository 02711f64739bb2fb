"""
Sampler implementation using the 'psutil' library.

This module provides the PsutilSampler class, used when pidstat is not
installed. It reads the statistics of one process in-process and renders them
in the `LC_ALL=C` pidstat layout, so captured output has the same format
whichever backend produced it.
"""

import logging
import os
import platform
import socket
import threading
from datetime import datetime
from typing import Iterable, List, Optional

import psutil

from ..models.runtime import CPU_METRIC, MEMORY_METRIC
from .base import AbstractSampler

logger = logging.getLogger(__name__)

CPU_HEADER_FIELDS = ["UID", "PID", "%usr", "%system", "%guest", "%wait", "%CPU", "CPU", "Command"]
MEMORY_HEADER_FIELDS = ["UID", "PID", "minflt/s", "majflt/s", "VSZ", "RSS", "%MEM", "Command"]


def _banner() -> str:
    """The first line pidstat prints, e.g. `Linux 6.1.0 (host) 10/19/2026 _x86_64_ (8 CPU)`."""
    return (
        f"{platform.system()} {platform.release()} ({socket.gethostname()}) "
        f"{datetime.now():%m/%d/%Y} _{platform.machine()}_ ({psutil.cpu_count() or 1} CPU)"
    )


def _format_row(time_token: str, fields: List[str]) -> str:
    return time_token + "".join(f" {field:>9}" for field in fields[:-1]) + f"  {fields[-1]}"


class PsutilSampler(AbstractSampler):
    """
    Samples CPU or memory statistics of one process with psutil.

    Attributes:
        _stop_event: A threading.Event used to interrupt the memory sampling wait.
    """

    name = "psutil"

    def __init__(self, task, console=None, **kwargs):
        super().__init__(task, console, **kwargs)
        if task.metric not in (CPU_METRIC, MEMORY_METRIC):
            raise ValueError(f"Unknown metric for psutil: {task.metric}")
        self._stop_event = threading.Event()
        self._proc: Optional[psutil.Process] = None

    def _uid(self) -> str:
        try:
            return str(self._proc.uids().real)
        except (AttributeError, psutil.Error):
            return str(os.getuid()) if hasattr(os, "getuid") else "0"

    def _cpu_row(self) -> List[str]:
        proc = self._proc
        before = proc.cpu_times()
        # Blocks for one interval and returns usage over that interval.
        total = proc.cpu_percent(interval=self.task.interval_seconds)
        after = proc.cpu_times()
        interval = float(self.task.interval_seconds)
        usr = max(0.0, (after.user - before.user) / interval * 100)
        system = max(0.0, (after.system - before.system) / interval * 100)
        wait = getattr(after, "iowait", 0.0) - getattr(before, "iowait", 0.0)
        cpu_num = proc.cpu_num() if hasattr(proc, "cpu_num") else 0
        return [
            self._uid(),
            str(proc.pid),
            f"{usr:.2f}",
            f"{system:.2f}",
            "0.00",
            f"{max(0.0, wait / interval * 100):.2f}",
            f"{total:.2f}",
            str(cpu_num),
            proc.name(),
        ]

    def _memory_row(self) -> List[str]:
        proc = self._proc
        memory = proc.memory_info()
        return [
            self._uid(),
            str(proc.pid),
            "0.00",
            "0.00",
            str(memory.vms // 1024),
            str(memory.rss // 1024),
            f"{proc.memory_percent():.2f}",
            proc.name(),
        ]

    def iter_lines(self) -> Iterable[str]:
        """
        Yields a pidstat-style banner, header and one data line per interval.

        Ends early, without error, when the target process exits.
        """
        header_fields = CPU_HEADER_FIELDS if self.task.metric == CPU_METRIC else MEMORY_HEADER_FIELDS
        try:
            self._proc = psutil.Process(self.task.process_id)
            # Prime the CPU counter so the first interval is measured correctly.
            self._proc.cpu_percent(interval=None)
        except psutil.NoSuchProcess:
            logger.info(f"PID {self.task.process_id} exited before sampling started")
            return
        except psutil.AccessDenied as e:
            logger.warning(f"Access denied while sampling PID {self.task.process_id}: {e}")
            return

        yield _banner()
        yield ""
        yield _format_row(f"{datetime.now():%H:%M:%S}", header_fields)

        for _ in range(self.task.sample_count):
            if self._stop_event.is_set():
                break
            try:
                if self.task.metric == CPU_METRIC:
                    row = self._cpu_row()
                else:
                    if self._stop_event.wait(self.task.interval_seconds):
                        break
                    row = self._memory_row()
            except psutil.NoSuchProcess:
                logger.info(
                    f"PID {self.task.process_id} exited; ending {self.task.metric} sampling early"
                )
                break
            except psutil.AccessDenied as e:
                logger.warning(f"Access denied while sampling PID {self.task.process_id}: {e}")
                break
            yield _format_row(f"{datetime.now():%H:%M:%S}", row)
            if self._stop_event.is_set():
                break

    def stop(self) -> None:
        self._stop_event.set()
