"""
Signal handling for a monitoring run.

SIGINT and SIGTERM are turned into a request to stop sampling: the handler
only sets the run's shutdown event, and the sampler notices it at the next
tick boundary or while sleeping.
"""

import logging
import signal
import threading
from typing import Any

logger = logging.getLogger(__name__)


class SignalHandler:
    """
    Installs SIGINT/SIGTERM handlers that set ``shutdown_requested``.

    The previous handlers are restored by cleanup_signal_handlers(); the
    handler can also be used as a context manager.
    """

    def __init__(self, shutdown_requested: threading.Event):
        self.shutdown_requested = shutdown_requested
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        """Set up signal handlers; only possible from the main thread."""
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._handle_signal)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._handle_signal)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for monitoring run")
        except ValueError as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except ValueError as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def _handle_signal(self, signum: int, frame: Any) -> None:
        logger.warning(f"Signal {signal.Signals(signum).name} received, stopping monitoring")
        self.shutdown_requested.set()

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.cleanup_signal_handlers()
