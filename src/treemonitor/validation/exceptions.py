"""
Error types and reporting helpers.

ValidationError is raised for bad configuration values and command-line
arguments. The handle_* helpers log an error once, at a chosen severity, with
the context it happened in, and then either re-raise it or (for the CLI)
exit the process.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Severities that also log the traceback.
_WITH_TRACEBACK = (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)

_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ValidationError(Exception):
    """
    A configuration value or command-line argument was rejected.

    Attributes:
        field_name: Dotted config key or option name, e.g.
                    ``monitor.collection.interval_seconds`` or ``--duration``.
        value: The rejected value as given.
        severity: How loudly handlers should report it.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` as "Error in <context>: <error>" and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: What was being done, e.g. "saving monitoring results"
        severity: ErrorSeverity or its name; debug and critical include the
                  traceback
        reraise: Whether to re-raise the exception after logging
        logger: Logger to report through (defaults to this module's)
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    target = logger or globals()["logger"]
    target.log(
        _LOG_LEVELS[severity],
        f"Error in {context}: {error}",
        exc_info=severity in _WITH_TRACEBACK,
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle errors raised while loading or validating config.toml."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Report a fatal command-line error and exit.

    Keyword Args:
        exit_code: Process exit status (default 1).
        include_traceback: Log at critical severity, with the traceback.
        Any other keyword is passed on to handle_error.
    """
    exit_code = kwargs.pop("exit_code", 1)
    if kwargs.pop("include_traceback", False):
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
    handle_error(error, f"CLI {context}", reraise=False, **kwargs)

    sys.exit(exit_code)
