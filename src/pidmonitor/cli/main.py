"""
Command-line interface for the pidmonitor process resource monitor.

This module provides the two CLI entry points of the package:

- ``pidmonitor <duration_seconds> <pid_1> [pid_2] ...`` samples CPU and memory
  usage of the given processes and writes a summary report and a raw log
- ``pidmonitor-env {init,del,copy}`` manages the local node data directory
"""

import argparse
import dataclasses
import logging
import subprocess
import sys
import time
import tomllib
from pathlib import Path
from typing import List, NoReturn, Optional

from ..config import get_config, set_config_path
from ..config.validators import SAMPLER_CHOICES, STORAGE_MODE_CHOICES
from ..environment import COMMANDS, EnvironmentManager
from ..models.config import AppConfig, MonitorConfig
from ..models.results import MonitoringResults
from ..models.runtime import MonitorRequest
from ..monitoring import ProcessMonitor
from ..validation import (
    MonitorEnvironmentError,
    UsageError,
    ValidationError,
    handle_cli_error,
    validate_monitor_arguments,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

PLOTTER_PATH = Path(__file__).parent.parent.parent.parent / "tools" / "plotter.py"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors as UsageError instead of exiting with 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{message}\n{self.format_usage().strip()}")


def _load_app_config(config_path: Optional[str]) -> AppConfig:
    """Load the configuration, exiting with code 1 on any configuration error."""
    try:
        if config_path:
            set_config_path(Path(config_path))
        return get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )


def build_monitor_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pidmonitor",
        description="Monitor CPU and memory usage of running processes for a fixed duration.",
    )
    parser.add_argument(
        "duration",
        nargs="?",
        help="Monitoring duration in seconds (positive integer).",
    )
    parser.add_argument(
        "pids",
        nargs="*",
        help="Process identifiers to monitor.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a config.toml file. Defaults to conf/config.toml.",
    )
    parser.add_argument(
        "--sampler",
        choices=SAMPLER_CHOICES,
        help="Sampler backend. Overrides monitor.sampler from the config.",
    )
    parser.add_argument(
        "--output-root",
        type=str,
        help="Directory in which the run directory is created. Overrides monitor.log_root_dir.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not echo sampler output to the console.",
    )
    return parser


def _apply_overrides(monitor_config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    overrides = {}
    if args.sampler:
        overrides["sampler"] = args.sampler
    if args.output_root:
        overrides["log_root_dir"] = Path(args.output_root).expanduser()
    if args.quiet:
        overrides["echo_samples"] = False
    if not overrides:
        return monitor_config
    return dataclasses.replace(monitor_config, **overrides)


def run_plotter(log_dir: Path) -> None:
    """Run tools/plotter.py on a finished run directory. Failures are only logged."""
    if not PLOTTER_PATH.is_file():
        logger.warning(f"Plotter tool not found at {PLOTTER_PATH}. Skipping plots.")
        return
    plotter_cmd = [sys.executable, str(PLOTTER_PATH), "--log-dir", str(log_dir)]
    logger.info(f"Executing plotter: {' '.join(plotter_cmd)}")
    try:
        result = subprocess.run(plotter_cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        logger.error(f"Failed to execute plotter tool: {type(e).__name__}: {e}")
        return
    if result.stdout:
        logger.info("Plotter tool output:\n" + result.stdout)
    if result.returncode != 0:
        logger.warning(
            f"Plotter tool exited with code {result.returncode}:\n{result.stderr}"
        )


def main_cli(argv: Optional[List[str]] = None) -> Optional[MonitoringResults]:
    """
    Entry point of ``pidmonitor``.

    All argument checks happen before anything is written to disk, so a
    malformed invocation leaves no run directory behind.

    Raises:
        SystemExit: With code 1 on usage, configuration or environment errors.
    """
    parser = build_monitor_parser()
    try:
        args = parser.parse_args(argv)
        duration, process_ids = validate_monitor_arguments(args.duration, args.pids)
    except UsageError as e:
        logger.error(f"Usage: {parser.prog} <duration_seconds> <pid_1> [pid_2] ...")
        logger.error(f"Example: {parser.prog} 60 1234 5678")
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    app_config = _load_app_config(args.config)
    monitor_config = _apply_overrides(app_config.monitor, args)

    request = MonitorRequest(
        duration_seconds=duration,
        process_ids=process_ids,
        timestamp=time.strftime("%Y%m%d_%H%M%S"),
    )

    try:
        monitor = ProcessMonitor(monitor_config, request)
        results = monitor.run()
    except MonitorEnvironmentError as e:
        handle_cli_error(
            error=e,
            context="monitoring run",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )
    except KeyboardInterrupt:
        logger.warning("Monitoring interrupted by user.")
        sys.exit(130)

    if monitor_config.generate_plots and results.live_ids:
        logger.info("--- Starting plot generation via external tool ---")
        run_plotter(results.paths.log_dir)
        logger.info("--- Plot generation finished ---")

    return results


def build_env_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pidmonitor-env",
        description="Manage the local node development environment.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        help="init: set up the data directory; del: delete it; copy: copy node binaries.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a config.toml file. Defaults to conf/config.toml.",
    )
    parser.add_argument(
        "--storage-mode",
        choices=STORAGE_MODE_CHOICES,
        help="Trie database storage. Overrides environment.storage_mode from the config.",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before deleting the data directory.",
    )
    return parser


def env_cli(argv: Optional[List[str]] = None) -> None:
    """
    Entry point of ``pidmonitor-env``.

    Raises:
        SystemExit: With code 1 on usage, configuration or environment errors.
    """
    parser = build_env_parser()
    try:
        args = parser.parse_args(argv)
        if args.command is None:
            raise UsageError(
                f"a command is required\n{parser.format_usage().strip()}",
                field_name="command",
            )
    except UsageError as e:
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    app_config = _load_app_config(args.config)
    env_config = app_config.environment
    if args.storage_mode:
        env_config = dataclasses.replace(env_config, storage_mode=args.storage_mode)

    manager = EnvironmentManager(env_config, assume_yes=args.yes)
    try:
        manager.run(args.command)
    except (MonitorEnvironmentError, OSError) as e:
        handle_cli_error(
            error=e,
            context=f"'{args.command}' command",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )


if __name__ == "__main__":
    main_cli()
