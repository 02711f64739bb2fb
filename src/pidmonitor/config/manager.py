"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_environment_config, validate_monitor_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default path to the main configuration file, relative to this module.
# Overridden by the CLI `--config` option and by tests.
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path and drop any cached configuration.

    Args:
        config_path: Path to the main config.toml file
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def reset_config_path() -> None:
    """Restore the default configuration path and drop any cached configuration."""
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH
    _CONFIG = None


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    """
    Load the complete application configuration from a TOML file.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    try:
        main_config_data = load_main_config(config_path)

        monitor_config = validate_monitor_config(main_config_data.get("monitor", {}))
        environment_config = validate_environment_config(
            main_config_data.get("environment", {})
        )

        logger.info(f"Successfully loaded configuration from {config_path}")
        return AppConfig(monitor=monitor_config, environment=environment_config)

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    When the default configuration file is absent (for example in an installed
    package) the built-in defaults are used. An explicitly configured path
    that does not exist raises FileNotFoundError.

    Returns:
        The singleton AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        if _CONFIG_FILE_PATH == _DEFAULT_CONFIG_FILE_PATH and not _CONFIG_FILE_PATH.exists():
            logger.info("No config.toml found, using built-in defaults")
            _CONFIG = AppConfig(
                monitor=validate_monitor_config({}),
                environment=validate_environment_config({}),
            )
        else:
            _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG
