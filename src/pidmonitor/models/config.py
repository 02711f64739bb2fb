"""
Configuration data models.

This module contains the configuration data structures for the process
monitor and the node environment manager.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # Sampler backend: "auto", "pidstat" or "psutil".
    sampler: str = "auto"
    # Cadence of the sampler in seconds. Only 1 is accepted.
    interval_seconds: int = 1
    # Directory in which the per-run `monitoring_logs_<timestamp>` directory is created.
    log_root_dir: Path = Path(".")
    log_dir_prefix: str = "monitoring_logs_"
    raw_log_name: str = "raw_output.log"
    summary_report_name: str = "summary_report.txt"
    # Stream every sampler line to the console while it is captured.
    echo_samples: bool = True
    # Run tools/plotter.py on the finished run directory.
    generate_plots: bool = False
    # Seconds to wait for a pidstat child to exit after SIGTERM.
    shutdown_timeout: float = 5.0


@dataclass
class EnvironmentConfig:
    """
    Configuration for the node data-directory manager, loaded from `config.toml`.
    """

    # Directory holding the copied binaries and the `config/` templates.
    root_dir: Path = field(default_factory=Path.cwd)
    data_dir_name: str = "data"
    # "file" preallocates a sparse trie database file, "device" uses a block device.
    storage_mode: str = "file"
    triedb_device: Path = Path("/dev/triedb")
    triedb_file: str = "node/triedb/test.db"
    triedb_size_bytes: int = 100 * 1024 ** 3
    chain: str = "monad_devnet"
    genesis_config: str = "config/forkpoint.genesis.toml"
    validators_config: str = "config/validators.toml"
    bft_target_dir: str = "../monad-bft/target"
    cxx_build_dir: str = "../monad-bft/monad-cxx/monad-execution/build"
    bft_binaries: List[str] = field(
        default_factory=lambda: [
            "monad-keystore",
            "monad-rpc",
            "monad-node",
            "examples/sign-name-record",
            "examples/txgen",
        ]
    )
    cxx_binaries: List[str] = field(
        default_factory=lambda: [
            "cmd/monad",
            "cmd/monad_cli",
            "category/mpt/monad_mpt",
        ]
    )
    mpt_binary: str = "monad_mpt"
    execution_binary: str = "monad"

    @property
    def data_dir(self) -> Path:
        """The top-level data directory (`<root_dir>/data`)."""
        return self.root_dir / self.data_dir_name

    @property
    def triedb_path(self) -> Path:
        """Storage passed to the trie database binaries for the current mode."""
        if self.storage_mode == "device":
            return self.triedb_device
        return self.data_dir / self.triedb_file


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    environment: EnvironmentConfig
