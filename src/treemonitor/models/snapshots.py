"""
Per-tick process measurements and their accumulated history.

A ProcessSnapshot is produced by the snapshot reader from the kernel's
per-process sources; the sampler then stamps it with the tick index and the
CPU percentage derived from the previous snapshot of the same process, and
appends it to that process's ProcessHistory.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ProcessSnapshot:
    """
    One process's measured state at one tick.

    Memory values are in bytes. CPU counters are cumulative clock ticks since
    process start (``user_ticks``, ``kernel_ticks``) or since boot, summed over
    all cores (``system_ticks``).
    """

    pid: int
    name: str
    rss_bytes: int          # VmRSS
    peak_rss_bytes: int     # VmHWM
    vm_bytes: int           # VmSize
    peak_vm_bytes: int      # VmPeak
    fd_slots: int           # FDSize
    threads: int
    user_ticks: int
    kernel_ticks: int
    system_ticks: int
    # Filled in by the sampler.
    tick: int = 0
    timestamp: float = 0.0
    cpu_percent: float = 0.0

    @property
    def cpu_ticks(self) -> int:
        return self.user_ticks + self.kernel_ticks

    def counters_decreased_since(self, previous: "ProcessSnapshot") -> bool:
        """True if any cumulative counter is lower than in ``previous``."""
        return (
            self.user_ticks < previous.user_ticks
            or self.kernel_ticks < previous.kernel_ticks
            or self.peak_rss_bytes < previous.peak_rss_bytes
            or self.peak_vm_bytes < previous.peak_vm_bytes
        )


@dataclass
class ProcessHistory:
    """
    Ordered snapshots of one process instance across a monitoring run.

    Append-only. While closed (the process is missing from the latest walk,
    or the run ended) no snapshots are accepted; the sampler reopens the
    history when the same process shows up again.
    """

    pid: int
    name: str
    snapshots: List[ProcessSnapshot] = field(default_factory=list)
    closed: bool = False

    @classmethod
    def start(cls, snapshot: ProcessSnapshot) -> "ProcessHistory":
        history = cls(pid=snapshot.pid, name=snapshot.name)
        history.append(snapshot)
        return history

    def append(self, snapshot: ProcessSnapshot) -> None:
        if self.closed:
            raise ValueError(f"history for pid {self.pid} is closed")
        if snapshot.pid != self.pid:
            raise ValueError(
                f"snapshot for pid {snapshot.pid} appended to history of pid {self.pid}"
            )
        self.snapshots.append(snapshot)

    def close(self) -> None:
        self.closed = True

    def reopen(self) -> None:
        self.closed = False

    @property
    def last(self) -> Optional[ProcessSnapshot]:
        return self.snapshots[-1] if self.snapshots else None

    @property
    def first_tick(self) -> Optional[int]:
        return self.snapshots[0].tick if self.snapshots else None

    def __len__(self) -> int:
        return len(self.snapshots)
