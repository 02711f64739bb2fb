"""
Configuration validation utilities.

This module turns the raw `[monitor]` and `[environment]` tables of
config.toml into validated dataclasses. Missing keys fall back to the
dataclass defaults.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import EnvironmentConfig, MonitorConfig
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_size_string,
    validate_string_list,
)

logger = logging.getLogger(__name__)

SAMPLER_CHOICES = ["auto", "pidstat", "psutil"]
STORAGE_MODE_CHOICES = ["file", "device"]


def _validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean", field_name=field_name, value=value
        )
    return value


def _validate_name(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value,
        )
    return value


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw `[monitor]` table from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = MonitorConfig()

    sampler = validate_enum_choice(
        monitor_data.get("sampler", defaults.sampler),
        choices=SAMPLER_CHOICES,
        field_name="monitor.sampler",
    )

    # One report per second, so the report count equals the duration.
    interval_seconds = validate_positive_integer(
        monitor_data.get("interval_seconds", defaults.interval_seconds),
        min_value=1,
        max_value=1,
        field_name="monitor.interval_seconds",
    )

    log_root_dir = Path(
        _validate_name(
            monitor_data.get("log_root_dir", str(defaults.log_root_dir)),
            "monitor.log_root_dir",
        )
    ).expanduser()

    log_dir_prefix = _validate_name(
        monitor_data.get("log_dir_prefix", defaults.log_dir_prefix),
        "monitor.log_dir_prefix",
    )
    raw_log_name = _validate_name(
        monitor_data.get("raw_log_name", defaults.raw_log_name),
        "monitor.raw_log_name",
    )
    summary_report_name = _validate_name(
        monitor_data.get("summary_report_name", defaults.summary_report_name),
        "monitor.summary_report_name",
    )
    if raw_log_name == summary_report_name:
        raise ValidationError(
            "monitor.raw_log_name and monitor.summary_report_name must differ",
            field_name="monitor.summary_report_name",
            value=summary_report_name,
        )

    echo_samples = _validate_bool(
        monitor_data.get("echo_samples", defaults.echo_samples),
        "monitor.echo_samples",
    )
    generate_plots = _validate_bool(
        monitor_data.get("generate_plots", defaults.generate_plots),
        "monitor.generate_plots",
    )
    shutdown_timeout = validate_positive_float(
        monitor_data.get("shutdown_timeout", defaults.shutdown_timeout),
        min_value=0.1,
        max_value=60.0,
        field_name="monitor.shutdown_timeout",
    )

    return MonitorConfig(
        sampler=sampler,
        interval_seconds=interval_seconds,
        log_root_dir=log_root_dir,
        log_dir_prefix=log_dir_prefix,
        raw_log_name=raw_log_name,
        summary_report_name=summary_report_name,
        echo_samples=echo_samples,
        generate_plots=generate_plots,
        shutdown_timeout=shutdown_timeout,
    )


def validate_environment_config(env_data: Dict[str, Any]) -> EnvironmentConfig:
    """
    Validate and create an EnvironmentConfig from raw configuration data.

    An empty or missing `root_dir` means the current working directory.

    Raises:
        ValidationError: If validation fails
    """
    defaults = EnvironmentConfig()

    root_dir_raw = env_data.get("root_dir", "")
    if not isinstance(root_dir_raw, str):
        raise ValidationError(
            "environment.root_dir must be a string",
            field_name="environment.root_dir",
            value=root_dir_raw,
        )
    root_dir = Path(root_dir_raw).expanduser().resolve() if root_dir_raw else defaults.root_dir

    storage_mode = validate_enum_choice(
        env_data.get("storage_mode", defaults.storage_mode),
        choices=STORAGE_MODE_CHOICES,
        field_name="environment.storage_mode",
    )

    triedb_size_bytes = validate_size_string(
        env_data.get("triedb_size", "100G"), field_name="environment.triedb_size"
    )

    string_fields = {}
    for key in (
        "data_dir_name",
        "triedb_file",
        "chain",
        "genesis_config",
        "validators_config",
        "bft_target_dir",
        "cxx_build_dir",
        "mpt_binary",
        "execution_binary",
    ):
        string_fields[key] = _validate_name(
            env_data.get(key, getattr(defaults, key)), f"environment.{key}"
        )

    triedb_device = Path(
        _validate_name(
            env_data.get("triedb_device", str(defaults.triedb_device)),
            "environment.triedb_device",
        )
    )

    bft_binaries = validate_string_list(
        env_data.get("bft_binaries", defaults.bft_binaries),
        field_name="environment.bft_binaries",
    )
    cxx_binaries = validate_string_list(
        env_data.get("cxx_binaries", defaults.cxx_binaries),
        field_name="environment.cxx_binaries",
    )

    return EnvironmentConfig(
        root_dir=root_dir,
        storage_mode=storage_mode,
        triedb_device=triedb_device,
        triedb_size_bytes=triedb_size_bytes,
        bft_binaries=bft_binaries,
        cxx_binaries=cxx_binaries,
        **string_fields,
    )
