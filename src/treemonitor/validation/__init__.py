"""
Input validation and error reporting shared by the config loader and the CLI.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)
from .validators import (
    validate_duration,
    validate_enum_choice,
    validate_path_exists,
    validate_positive_float,
)

__all__ = [
    "ErrorSeverity",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "validate_duration",
    "validate_enum_choice",
    "validate_path_exists",
    "validate_positive_float",
]
