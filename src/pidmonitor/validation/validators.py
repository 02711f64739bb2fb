"""
Input validation functions.

Every validator returns the normalized value on success and raises
ValidationError (or one of its subclasses) otherwise.
"""

import re
from typing import Any, List, Optional, Sequence

from .exceptions import UsageError, ValidationError

# Command-line integers are plain decimal digits only.
_DIGITS_PATTERN = re.compile(r"[0-9]+")

# Binary size suffixes accepted by validate_size_string, as used by `truncate -s`.
_SIZE_UNITS = {
    "": 1,
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
}


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if (
        isinstance(value, bool)
        or isinstance(value, float)
        or (isinstance(value, str) and not _DIGITS_PATTERN.fullmatch(value))
    ):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within the given bounds.

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_enum_choice(
    value: Any,
    choices: Sequence[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching choice, in the spelling used by ``choices``

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {list(choices)}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {list(choices)}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(lower_value)]


def validate_string_list(value: Any, field_name: str = "value") -> List[str]:
    """
    Validate that a value is a list of non-empty strings.

    Raises:
        ValidationError: If any item is not a non-empty string
    """
    if not isinstance(value, list):
        raise ValidationError(
            f"{field_name} must be a list of strings",
            field_name=field_name,
            value=value
        )
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(
                f"{field_name}[{i}] must be a non-empty string",
                field_name=field_name,
                value=value
            )
    return list(value)


def validate_size_string(value: Any, field_name: str = "size") -> int:
    """
    Parse a storage size such as "100G", "512M" or "4096" into bytes.

    Raises:
        ValidationError: If the size is malformed or not positive
    """
    match = re.match(r'^\s*(\d+)\s*([KMGT]?)B?\s*$', str(value), re.IGNORECASE)
    if not match:
        raise ValidationError(
            f"{field_name} must look like '100G', '512M' or a byte count, got {value}",
            field_name=field_name,
            value=value
        )
    size = int(match.group(1)) * _SIZE_UNITS[match.group(2).upper()]
    if size <= 0:
        raise ValidationError(
            f"{field_name} must be greater than zero, got {value}",
            field_name=field_name,
            value=value
        )
    return size


def validate_monitor_arguments(
    duration: Optional[str],
    pids: Sequence[str],
) -> tuple:
    """
    Validate the positional arguments of the monitor command.

    Args:
        duration: The raw duration argument, or None when absent
        pids: The raw process identifier arguments

    Returns:
        Tuple of (duration_seconds, process_ids)

    Raises:
        UsageError: If fewer than two arguments were supplied or any value
            is not a positive integer
    """
    if duration is None or not pids:
        raise UsageError(
            "At least 2 arguments are required: <total_duration_seconds> <PID_1> [PID_2] ...",
            field_name="arguments",
            value=[duration, *pids] if duration is not None else list(pids)
        )

    try:
        duration_seconds = validate_positive_integer(
            duration, min_value=1, field_name="duration_seconds"
        )
        process_ids = tuple(
            validate_positive_integer(pid, min_value=1, field_name=f"PID '{pid}'")
            for pid in pids
        )
    except ValidationError as e:
        raise UsageError(str(e), field_name=e.field_name, value=e.value) from e

    return duration_seconds, process_ids
