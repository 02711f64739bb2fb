"""
Runtime data models.

This module contains data structures used during the execution of a monitoring
run: the immutable request, the generated paths and the sampling tasks.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

CPU_METRIC = "cpu"
MEMORY_METRIC = "memory"
METRICS = (CPU_METRIC, MEMORY_METRIC)


@dataclass(frozen=True)
class MonitorRequest:
    """
    A single monitoring request, built once from command-line input.
    """

    # Total sampling window in seconds; also the number of one-second samples.
    duration_seconds: int
    # Requested process identifiers in command-line order, duplicates allowed.
    process_ids: Tuple[int, ...]
    # Capture timestamp (%Y%m%d_%H%M%S) used for the run directory and the report.
    timestamp: str


@dataclass
class RunPaths:
    """
    A container for all generated file paths for a single monitoring run.
    """

    log_dir: Path
    # Combined sampler output of every process, kept after the run.
    raw_log_file: Path
    # Human-readable summary, kept after the run.
    summary_report_file: Path

    def cpu_capture_file(self, pid: int) -> Path:
        """Transient CPU capture file for one process."""
        return self.log_dir / f"cpu_{pid}.tmp"

    def memory_capture_file(self, pid: int) -> Path:
        """Transient memory capture file for one process."""
        return self.log_dir / f"mem_{pid}.tmp"

    def capture_file(self, pid: int, metric: str) -> Path:
        if metric == CPU_METRIC:
            return self.cpu_capture_file(pid)
        if metric == MEMORY_METRIC:
            return self.memory_capture_file(pid)
        raise ValueError(f"Unknown metric: {metric}")


@dataclass(frozen=True)
class SamplingTask:
    """
    One (process, metric) sampling job. Exactly one task writes `output_file`.
    """

    process_id: int
    metric: str
    duration_seconds: int
    interval_seconds: int
    output_file: Path

    @property
    def sample_count(self) -> int:
        """Number of sampler reports covering the duration (at least one)."""
        return max(1, self.duration_seconds // self.interval_seconds)
