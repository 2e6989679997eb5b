"""
Errors raised while reading kernel-exposed process information.

The sampling loop treats these differently:

- ReadError: a kernel source could not be read. Fatal for the run when it
  concerns the system-wide tick source, otherwise it only stops one branch
  of the process-tree walk.
- ProcessGoneError: the process exited between discovery and read. Expected;
  the pid is simply absent from the current tick.
- ParseError: a source was readable but did not have the expected shape. Only
  the affected pid's sample is dropped, but the error is reported.
- PidReuseAnomaly: a pid's cumulative counters went backwards, so the pid now
  belongs to a different process. Logged, never propagated.
"""

from typing import Optional


class MonitorError(Exception):
    """Base class for all process sampling errors."""

    def __init__(self, message: str, pid: Optional[int] = None, source: Optional[str] = None):
        super().__init__(message)
        self.pid = pid
        self.source = source


class ReadError(MonitorError):
    """A kernel-exposed source was unreadable or malformed."""


class ProcessGoneError(MonitorError):
    """The process exited before its sources could be read."""


class ParseError(MonitorError):
    """A kernel-exposed source did not match the expected format."""


class PidReuseAnomaly(MonitorError):
    """A pid's monotonic counters decreased between two ticks."""
