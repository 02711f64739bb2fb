"""
Process resource monitoring.

This module provides the ProcessMonitor, which validates, samples, summarizes
and finalizes a monitoring request, and the aggregation functions it uses.
"""

from .coordinator import ProcessMonitor
from .summary import compute_metric_stats, summarize, summarize_files

__all__ = [
    "ProcessMonitor",
    "compute_metric_stats",
    "summarize",
    "summarize_files",
]
