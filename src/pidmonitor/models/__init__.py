"""
Data models for the monitoring system.

Configuration Models:
- Monitor settings and node environment settings

Runtime Models:
- The immutable monitoring request
- Generated file paths and per-(process, metric) sampling tasks

Result Models:
- Parsed sampler records, per-process summaries and the run result
"""

from .config import AppConfig, EnvironmentConfig, MonitorConfig
from .runtime import (
    CPU_METRIC,
    MEMORY_METRIC,
    METRICS,
    MonitorRequest,
    RunPaths,
    SamplingTask,
)
from .results import MetricStats, MonitoringResults, ProcessSummary, SampleRecord

__all__ = [
    # Configuration
    "AppConfig",
    "EnvironmentConfig",
    "MonitorConfig",
    # Runtime
    "CPU_METRIC",
    "MEMORY_METRIC",
    "METRICS",
    "MonitorRequest",
    "RunPaths",
    "SamplingTask",
    # Results
    "MetricStats",
    "MonitoringResults",
    "ProcessSummary",
    "SampleRecord",
]
