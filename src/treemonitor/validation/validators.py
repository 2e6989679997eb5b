"""
Value validators for configuration entries and command-line arguments.

Each validator returns the value converted to its proper type, or raises
ValidationError naming the offending field.
"""

import os
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from .exceptions import ValidationError

# Go-style duration components, e.g. "1h30m", "90s", "2.5m", "1500ms".
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Convert ``value`` to a float within ``[min_value, max_value]``.

    Strings such as ``"1.5"`` from the command line are accepted.
    """
    # bool is an int subclass; "true" in a config file is never a number
    number = None
    if not isinstance(value, bool):
        try:
            number = float(value)
        except (ValueError, TypeError):
            pass
    if number is None:
        raise ValidationError(
            f"{field_name} must be a valid number, got {value!r}", field_name=field_name, value=value
        )

    if number < min_value or (max_value is not None and number > max_value):
        bounds = f">= {min_value}" if max_value is None else f"between {min_value} and {max_value}"
        raise ValidationError(
            f"{field_name} must be {bounds}, got {number}", field_name=field_name, value=value
        )
    return number


def validate_path_exists(path: Union[str, Path], field_name: str = "path") -> str:
    """Return ``path`` as a string if it exists on disk."""
    path_str = str(path)
    if not os.path.exists(path_str):
        raise ValidationError(
            f"{field_name} does not exist: {path_str}", field_name=field_name, value=path_str
        )
    return path_str


def validate_enum_choice(value: Any, valid_choices: List[str], field_name: str = "value") -> str:
    if value not in valid_choices:
        raise ValidationError(
            f"{field_name} must be one of {', '.join(valid_choices)}, got {value!r}",
            field_name=field_name,
            value=value,
        )
    return value


def validate_duration(
    value: Any,
    min_seconds: float = 0.0,
    field_name: str = "duration"
) -> float:
    """
    Validate a run duration and convert it to seconds.

    Accepts a number of seconds or a Go-style duration string made of
    ``<number><unit>`` parts, where the unit is one of ``h``, ``m``, ``s``
    or ``ms``.

    Examples:
        >>> validate_duration("1m30s")
        90.0
        >>> validate_duration("10")
        10.0

    Raises:
        ValidationError: If the value cannot be parsed or is below min_seconds
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            parts = _DURATION_PART_RE.findall(text)
            if not parts or "".join(num + unit for num, unit in parts) != text:
                raise ValidationError(
                    f"{field_name} must be a duration like '10s' or '1m30s', got '{value}'",
                    field_name=field_name,
                    value=value
                )
            seconds = sum(float(num) * _DURATION_UNITS[unit] for num, unit in parts)
    else:
        raise ValidationError(
            f"{field_name} must be a duration like '10s' or '1m30s', got {value!r}",
            field_name=field_name,
            value=value
        )

    if seconds < min_seconds:
        raise ValidationError(
            f"{field_name} must be >= {min_seconds}s, got {seconds}s",
            field_name=field_name,
            value=value
        )
    return seconds
