"""
Sample and result data models.

This module defines the records parsed from sampler output, the per-process
aggregates derived from them and the container describing a finished run.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .runtime import MonitorRequest, RunPaths


@dataclass(frozen=True)
class SampleRecord:
    """
    One sampler data line for one process.

    A CPU line sets `cpu_percent`; a memory line sets `resident_memory_kb`.
    """

    timestamp: str
    process_id: int
    cpu_percent: Optional[float] = None
    resident_memory_kb: Optional[int] = None


@dataclass(frozen=True)
class MetricStats:
    """Average and maximum of one metric over all valid samples."""

    average: float
    maximum: float
    sample_count: int


@dataclass(frozen=True)
class ProcessSummary:
    """
    Derived statistics for one monitored process.

    `cpu` is expressed in percent and `memory` in megabytes. Either is None
    when the process produced no valid samples for that metric.
    """

    process_id: int
    cpu: Optional[MetricStats] = None
    memory: Optional[MetricStats] = None

    @property
    def cpu_average_percent(self) -> Optional[float]:
        return self.cpu.average if self.cpu else None

    @property
    def cpu_max_percent(self) -> Optional[float]:
        return self.cpu.maximum if self.cpu else None

    @property
    def memory_average_mb(self) -> Optional[float]:
        return self.memory.average if self.memory else None

    @property
    def memory_max_mb(self) -> Optional[float]:
        return self.memory.maximum if self.memory else None

    @property
    def sample_count(self) -> int:
        """Number of sampling intervals observed for this process."""
        return max(
            self.cpu.sample_count if self.cpu else 0,
            self.memory.sample_count if self.memory else 0,
        )


@dataclass
class MonitoringResults:
    """
    Everything a finished monitoring run produced.
    """

    request: MonitorRequest
    paths: RunPaths
    # Live process identifiers in request order, without duplicates.
    live_ids: List[int] = field(default_factory=list)
    # Identifiers that failed the liveness check, in request order.
    skipped_ids: List[int] = field(default_factory=list)
    # One summary per live process, in the same order as `live_ids`.
    summaries: List[ProcessSummary] = field(default_factory=list)
