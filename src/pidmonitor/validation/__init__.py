"""
Validation and error handling for the pidmonitor package.

This module provides input validation and error handling with consistent
error reporting across the application.
"""

from .exceptions import (
    ErrorSeverity,
    MonitorEnvironmentError,
    UsageError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
)

from .validators import (
    validate_enum_choice,
    validate_monitor_arguments,
    validate_positive_float,
    validate_positive_integer,
    validate_size_string,
    validate_string_list,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "MonitorEnvironmentError",
    "UsageError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_file_error",
    # Validators
    "validate_enum_choice",
    "validate_monitor_arguments",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_size_string",
    "validate_string_list",
]
