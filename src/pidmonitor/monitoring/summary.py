"""
Aggregation of captured sampler output into per-process summaries.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import polars as pl

from ..collectors.parsing import parse_capture_lines
from ..models.results import MetricStats, ProcessSummary
from ..models.runtime import CPU_METRIC, MEMORY_METRIC

logger = logging.getLogger(__name__)

KB_PER_MB = 1024


def compute_metric_stats(values: Sequence[float], scale: float = 1.0) -> Optional[MetricStats]:
    """Mean and maximum of a series of samples.

    Args:
        values: Raw sample values.
        scale: Divisor applied to every value (e.g. 1024 for kB to MB).

    Returns:
        MetricStats, or None when there are no samples.
    """
    if not values:
        return None

    frame = pl.DataFrame({"value": [float(v) for v in values]}, schema={"value": pl.Float64})
    row = frame.select(
        (pl.col("value") / scale).mean().alias("average"),
        (pl.col("value") / scale).max().alias("maximum"),
        pl.col("value").count().alias("sample_count"),
    ).row(0, named=True)

    return MetricStats(
        average=row["average"],
        maximum=row["maximum"],
        sample_count=int(row["sample_count"]),
    )


def summarize(
    cpu_lines: Iterable[str], memory_lines: Iterable[str], process_id: int
) -> ProcessSummary:
    """Summarize the captured CPU and memory output of one process.

    Only data lines whose PID column equals `process_id` are counted.

    Args:
        cpu_lines: Captured `pidstat -u` output.
        memory_lines: Captured `pidstat -r` output (RSS in kB).
        process_id: The process the output belongs to.

    Returns:
        ProcessSummary with CPU in percent and memory in MB.
    """
    cpu_records = parse_capture_lines(cpu_lines, CPU_METRIC, process_id)
    memory_records = parse_capture_lines(memory_lines, MEMORY_METRIC, process_id)

    cpu = compute_metric_stats([r.cpu_percent for r in cpu_records])
    memory = compute_metric_stats(
        [r.resident_memory_kb for r in memory_records], scale=KB_PER_MB
    )
    if cpu is None:
        logger.warning(f"No CPU data found for PID {process_id}")
    if memory is None:
        logger.warning(f"No memory data found for PID {process_id}")

    return ProcessSummary(process_id=process_id, cpu=cpu, memory=memory)


def _read_lines(path: Path) -> List[str]:
    if not path.exists():
        logger.warning(f"Capture file missing: {path}")
        return []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.readlines()


def summarize_files(cpu_file: Path, memory_file: Path, process_id: int) -> ProcessSummary:
    """Summarize one process from its two capture files."""
    return summarize(_read_lines(cpu_file), _read_lines(memory_file), process_id)
