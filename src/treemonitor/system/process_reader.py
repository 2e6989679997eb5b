"""
Per-process counter reader.

Builds a ProcessSnapshot from two kernel-exposed sources:

- ``/proc/<pid>/status``: ``Key:\\tValue`` lines giving the name, fd slots,
  thread count and the memory sizes (with a unit suffix).
- ``/proc/<pid>/stat``: a single line of space-separated fields whose 14th
  and 15th entries are the cumulative user and kernel CPU ticks.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from ..models.snapshots import ProcessSnapshot
from .exceptions import ParseError, ProcessGoneError
from .proc_time import ProcTimeSource
from .sizes import parse_labeled_size

logger = logging.getLogger(__name__)

# status keys holding unit-labelled memory sizes, mapped to snapshot fields
MEMORY_FIELDS: Dict[str, str] = {
    "VmPeak": "peak_vm_bytes",
    "VmSize": "vm_bytes",
    "VmHWM": "peak_rss_bytes",
    "VmRSS": "rss_bytes",
}

# status keys holding plain counts
COUNT_FIELDS: Dict[str, str] = {
    "FDSize": "fd_slots",
    "Threads": "threads",
}

# 0-based positions of utime/stime in the full stat line
STAT_UTIME_INDEX = 13
STAT_STIME_INDEX = 14


class ProcessSnapshotReader:
    """
    Reads one process's current counters from the proc filesystem.

    Attributes:
        proc_root: Root of the proc filesystem, ``/proc`` outside of tests.
        time_source: Used for the system-wide tick total when the caller does
                     not supply one.
    """

    def __init__(
        self,
        proc_root: Union[str, Path] = "/proc",
        time_source: Optional[ProcTimeSource] = None,
    ):
        self.proc_root = Path(proc_root)
        self.time_source = time_source or ProcTimeSource(proc_root)

    def read_snapshot(self, pid: int, system_ticks: Optional[int] = None) -> ProcessSnapshot:
        """
        Read the status and stat sources of ``pid``.

        Args:
            pid: Process to read.
            system_ticks: System-wide tick total for this tick. Read from the
                          time source when omitted.

        Raises:
            ProcessGoneError: If either source cannot be opened.
            ParseError: If either source has an unexpected format.
            ReadError: If the system tick total had to be read and failed.
        """
        status_text = self._read_source(pid, "status")
        stat_text = self._read_source(pid, "stat")

        fields = self.parse_status(status_text, pid)
        user_ticks, kernel_ticks = self.parse_stat(stat_text, pid)

        if system_ticks is None:
            system_ticks = self.time_source.current_system_ticks()

        return ProcessSnapshot(
            pid=pid,
            name=fields.pop("name", ""),
            user_ticks=user_ticks,
            kernel_ticks=kernel_ticks,
            system_ticks=system_ticks,
            **{attr: fields.get(attr, 0) for attr in (*MEMORY_FIELDS.values(), *COUNT_FIELDS.values())},
        )

    def _read_source(self, pid: int, name: str) -> str:
        path = self.proc_root / str(pid) / name
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as e:
            # ENOENT or ESRCH: the process exited after it was discovered.
            raise ProcessGoneError(
                f"process {pid} is gone ({path}: {e.strerror or e})", pid=pid, source=str(path)
            ) from e

    @staticmethod
    def parse_status(text: str, pid: int) -> Dict[str, object]:
        """
        Parse the ``Key:\\tValue`` lines of a status source.

        Keys that are absent (kernel threads and zombies have no memory lines)
        are left out of the result.

        Raises:
            ParseError: On a line without a colon-delimited key/value pair, a
                        non-numeric count, or an unknown size unit.
        """
        fields: Dict[str, object] = {}
        for line in text.splitlines():
            if not line.strip():
                continue
            key, sep, value = line.partition(":")
            key = key.strip()
            if not sep or not key:
                raise ParseError(f"couldn't parse status line of pid {pid}: {line!r}", pid=pid)
            value = value.strip()

            try:
                if key == "Name":
                    fields["name"] = value
                elif key in COUNT_FIELDS:
                    fields[COUNT_FIELDS[key]] = int(value)
                elif key in MEMORY_FIELDS:
                    fields[MEMORY_FIELDS[key]] = parse_labeled_size(value)
            except ValueError:
                raise ParseError(f"non-numeric {key} for pid {pid}: {value!r}", pid=pid)
            except ParseError as e:
                raise ParseError(f"{e} in {key} of pid {pid}", pid=pid) from e
        return fields

    @staticmethod
    def parse_stat(text: str, pid: int) -> Tuple[int, int]:
        """
        Return ``(user_ticks, kernel_ticks)`` from a stat line.

        The second field is the command name in parentheses and may contain
        spaces, so positions are counted from the last ``)`` when present.

        Raises:
            ParseError: If there are too few fields or the ticks are not numeric.
        """
        rparen = text.rfind(")")
        if rparen != -1:
            # fields after "(comm)" start at position 2
            tokens = ["", ""] + text[rparen + 1:].split()
        else:
            tokens = text.split()

        if len(tokens) <= STAT_STIME_INDEX:
            raise ParseError(f"couldn't parse stat of pid {pid}: {text.strip()!r}", pid=pid)
        try:
            return int(tokens[STAT_UTIME_INDEX]), int(tokens[STAT_STIME_INDEX])
        except ValueError:
            raise ParseError(f"non-numeric CPU ticks in stat of pid {pid}: {text.strip()!r}", pid=pid)
