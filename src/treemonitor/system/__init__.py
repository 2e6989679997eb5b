"""
Kernel interaction for process sampling.

This module provides the leaf components of the sampler:

- System-wide CPU tick source (``/proc/stat``)
- Per-process snapshot reader (``/proc/<pid>/status`` and ``/proc/<pid>/stat``)
- Process-tree walker with pluggable child enumeration
- Best-effort termination of a process tree
- Unit-labelled size parsing and formatting
"""

from .commands import check_pgrep_installed, run_command
from .exceptions import (
    MonitorError,
    ParseError,
    PidReuseAnomaly,
    ProcessGoneError,
    ReadError,
)
from .proc_time import ProcTimeSource
from .process_reader import ProcessSnapshotReader
from .process_tree import (
    ChildEnumerator,
    PgrepChildEnumerator,
    ProcessTreeWalker,
    PsutilChildEnumerator,
)
from .sizes import format_size, parse_labeled_size
from .termination import terminate_processes

__all__ = [
    # Commands
    "check_pgrep_installed",
    "run_command",
    # Errors
    "MonitorError",
    "ParseError",
    "PidReuseAnomaly",
    "ProcessGoneError",
    "ReadError",
    # Readers
    "ProcTimeSource",
    "ProcessSnapshotReader",
    # Tree discovery
    "ChildEnumerator",
    "PgrepChildEnumerator",
    "ProcessTreeWalker",
    "PsutilChildEnumerator",
    # Sizes
    "format_size",
    "parse_labeled_size",
    # Termination
    "terminate_processes",
]
