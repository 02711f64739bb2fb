"""
pidmonitor: Process CPU and memory monitoring tool.

This package samples the CPU and resident memory usage of already-running
processes for a fixed duration, keeps the raw sampler output and writes a
per-process summary report. It also ships a small manager for a local node
development environment.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- system: Process liveness checks and external commands
- collectors: Sampler backends (pidstat, psutil) and the output parser
- executor: Thread pool used to run samplers in parallel
- monitoring: Monitoring coordination and aggregation
- orchestration: Run directory, report and raw log handling
- environment: Node data-directory management
- cli: Command-line interface

Usage:
    From command line:
        pidmonitor 60 1234 5678
        python -m pidmonitor 60 1234 5678

    Programmatically:
        from pidmonitor import ProcessMonitor, MonitorRequest, get_config
        config = get_config()
        request = MonitorRequest(60, (1234,), "20250101_120000")
        results = ProcessMonitor(config.monitor, request).run()
"""

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .monitoring import ProcessMonitor
from .environment import EnvironmentManager
from .cli import env_cli, main_cli

# Model classes for external use
from .models import (
    AppConfig,
    EnvironmentConfig,
    MetricStats,
    MonitorConfig,
    MonitoringResults,
    MonitorRequest,
    ProcessSummary,
    RunPaths,
)

# Validation utilities
from .validation import (
    MonitorEnvironmentError,
    UsageError,
    ValidationError,
    validate_monitor_arguments,
)

# System utilities
from .system import check_pidstat_installed, is_process_alive, validate_targets

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "ProcessMonitor",
    "EnvironmentManager",
    "main_cli",
    "env_cli",
    # Models
    "AppConfig",
    "EnvironmentConfig",
    "MetricStats",
    "MonitorConfig",
    "MonitoringResults",
    "MonitorRequest",
    "ProcessSummary",
    "RunPaths",
    # Validation
    "MonitorEnvironmentError",
    "UsageError",
    "ValidationError",
    "validate_monitor_arguments",
    # System utilities
    "check_pidstat_installed",
    "is_process_alive",
    "validate_targets",
]
