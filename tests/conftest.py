"""
Pytest configuration and shared fixtures for the pidmonitor test suite.

This module provides common fixtures, sample sampler output and configuration
for all test modules in the pidmonitor project.
"""

import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Sample sampler output
# ============================================================================

PIDSTAT_CPU_OUTPUT = """\
Linux 6.1.0-18-amd64 (buildhost) 10/19/2026 _x86_64_ (8 CPU)

10:00:00      UID       PID    %usr %system  %guest   %wait    %CPU   CPU  Command
10:00:01     1000      4242    8.00    2.00    0.00    0.00   10.00     3  python3
10:00:02     1000      4242   15.00    5.00    0.00    0.00   20.00     3  python3
10:00:03     1000      4242   25.00    5.00    0.00    0.00   30.00     1  python3

Average:     1000      4242   16.00    4.00    0.00    0.00   20.00     -  python3
"""

PIDSTAT_MEMORY_OUTPUT = """\
Linux 6.1.0-18-amd64 (buildhost) 10/19/2026 _x86_64_ (8 CPU)

10:00:00      UID       PID  minflt/s  majflt/s     VSZ     RSS   %MEM  Command
10:00:01     1000      4242      0.00      0.00  204800    1024   0.01  python3
10:00:02     1000      4242      0.00      0.00  204800    2048   0.02  python3
10:00:03     1000      4242      0.00      0.00  204800    3072   0.03  python3

Average:     1000      4242      0.00      0.00  204800    2048   0.02  python3
"""

# 12-hour locale output: an extra AM/PM token shifts every column by one.
PIDSTAT_CPU_OUTPUT_12H = """\
Linux 6.1.0-18-amd64 (buildhost) 10/19/2026 _x86_64_ (8 CPU)

10:00:00 AM   UID       PID    %usr %system  %guest   %wait    %CPU   CPU  Command
10:00:01 AM  1000      4242    8.00    2.00    0.00    0.00   40.00     3  python3
10:00:02 AM  1000      4242   15.00    5.00    0.00    0.00   60.00     3  python3
"""

PIDSTAT_MEMORY_OUTPUT_12H = """\
Linux 6.1.0-18-amd64 (buildhost) 10/19/2026 _x86_64_ (8 CPU)

10:00:00 AM   UID       PID  minflt/s  majflt/s     VSZ     RSS   %MEM  Command
10:00:01 AM  1000      4242      0.00      0.00  204800    4096   0.01  python3
"""


@pytest.fixture
def pidstat_cpu_output():
    return PIDSTAT_CPU_OUTPUT


@pytest.fixture
def pidstat_memory_output():
    return PIDSTAT_MEMORY_OUTPUT


@pytest.fixture
def pidstat_cpu_output_12h():
    return PIDSTAT_CPU_OUTPUT_12H


@pytest.fixture
def pidstat_memory_output_12h():
    return PIDSTAT_MEMORY_OUTPUT_12H


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def own_pid():
    """Identifier of the test process itself, which is guaranteed to be alive."""
    return os.getpid()


@pytest.fixture
def sample_config_data(temp_dir) -> Dict[str, Any]:
    """Sample configuration data for testing."""
    return {
        "monitor": {
            "sampler": "psutil",
            "interval_seconds": 1,
            "log_root_dir": str(temp_dir / "logs"),
            "log_dir_prefix": "monitoring_logs_",
            "raw_log_name": "raw_output.log",
            "summary_report_name": "summary_report.txt",
            "echo_samples": False,
            "generate_plots": False,
            "shutdown_timeout": 2.0,
        },
        "environment": {
            "root_dir": str(temp_dir / "node"),
            "data_dir_name": "data",
            "storage_mode": "file",
            "triedb_device": "/dev/triedb",
            "triedb_file": "node/triedb/test.db",
            "triedb_size": "1M",
            "chain": "monad_devnet",
            "bft_target_dir": "../bft/target",
            "cxx_build_dir": "../cxx/build",
            "bft_binaries": ["monad-node", "examples/txgen"],
            "cxx_binaries": ["cmd/monad", "category/mpt/monad_mpt"],
        },
    }


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary configuration file for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


@pytest.fixture
def monitor_config(temp_dir):
    """A MonitorConfig writing into the temporary directory with the psutil sampler."""
    from pidmonitor.models.config import MonitorConfig

    return MonitorConfig(
        sampler="psutil",
        log_root_dir=temp_dir / "logs",
        echo_samples=False,
        shutdown_timeout=2.0,
    )


@pytest.fixture(autouse=True)
def reset_config_after_test():
    """Automatically restore the default configuration path after each test."""
    yield  # Run the test

    from pidmonitor.config import reset_config_path

    reset_config_path()
