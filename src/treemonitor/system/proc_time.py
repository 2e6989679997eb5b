"""
System-wide CPU tick source.

Reads the aggregate ``cpu`` line of ``/proc/stat``, whose fields are the
cumulative user, nice, system, idle, iowait, irq, softirq, steal and guest
ticks across all cores since boot.
"""

import logging
from pathlib import Path
from typing import Union

from .exceptions import ReadError

logger = logging.getLogger(__name__)


class ProcTimeSource:
    """Reads the total CPU-tick budget consumed system-wide since boot."""

    def __init__(self, proc_root: Union[str, Path] = "/proc"):
        self.stat_path = Path(proc_root) / "stat"

    def current_system_ticks(self) -> int:
        """
        Sum every numeric field of the first aggregate ``cpu`` line.

        Returns:
            The total number of CPU ticks, across all cores.

        Raises:
            ReadError: If the source cannot be read or has no usable cpu line.
        """
        try:
            with open(self.stat_path, "r", encoding="utf-8") as f:
                for line in f:
                    tokens = line.split()
                    if not tokens or tokens[0] != "cpu":
                        continue
                    total = sum(int(token) for token in tokens[1:] if token.isdigit())
                    if total == 0:
                        raise ReadError(
                            f"no CPU ticks on aggregate line of {self.stat_path}: {line.strip()!r}",
                            source=str(self.stat_path),
                        )
                    return total
        except OSError as e:
            raise ReadError(
                f"failed to read {self.stat_path}: {e}", source=str(self.stat_path)
            ) from e

        raise ReadError(
            f"no aggregate cpu line found in {self.stat_path}", source=str(self.stat_path)
        )
