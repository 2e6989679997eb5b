"""
Monitoring results data models.

This module defines what a finished monitoring run hands to the reporting and
storage layers: the per-process histories, the usage summaries derived from
them and the bookkeeping of how and why the run ended.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .snapshots import ProcessHistory


class StopReason(Enum):
    """Why a sampling run ended."""
    DURATION_ELAPSED = "duration_elapsed"
    WORKLOAD_EXITED = "workload_exited"
    SYSTEM_SOURCE_FAILED = "system_source_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class UsageSummary:
    """
    Resource usage of one process over the ticks it was observed.

    Memory values are in bytes; ``lifetime_ticks`` is the number of samples.
    """

    pid: int
    name: str
    avg_cpu_percent: float
    avg_rss_bytes: int
    peak_rss_bytes: int
    lifetime_ticks: int
    avg_vm_bytes: int
    peak_vm_bytes: int
    first_tick: int
    last_tick: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MonitoringResults:
    """
    Complete outcome of one sampling run.

    ``histories`` holds one history per pid; a pid that was reused during the
    run keeps only the history of its latest process instance. Summaries are
    filled in by the aggregator once sampling has stopped.
    """

    root_pid: int
    interval_seconds: float
    histories: Dict[int, ProcessHistory] = field(default_factory=dict)
    summaries: Dict[int, UsageSummary] = field(default_factory=dict)
    ticks_completed: int = 0
    stop_reason: Optional[StopReason] = None
    # Per-pid parse failures and branch enumeration failures.
    errors: List[str] = field(default_factory=list)
    cleanup_errors: List[str] = field(default_factory=list)
    started_at: float = 0.0
    finished_at: float = 0.0
    command: List[str] = field(default_factory=list)
    exit_code: Optional[int] = None

    @property
    def incomplete(self) -> bool:
        """True when the run ended before its configured window."""
        return self.stop_reason is not None and self.stop_reason != StopReason.DURATION_ELAPSED

    @property
    def duration_seconds(self) -> float:
        return max(0.0, self.finished_at - self.started_at)

    def to_sample_rows(self) -> List[Dict[str, Any]]:
        """Flatten every recorded snapshot into one row per pid and tick."""
        rows = []
        for pid in sorted(self.histories):
            for snapshot in self.histories[pid].snapshots:
                rows.append(
                    {
                        "tick": snapshot.tick,
                        "timestamp": snapshot.timestamp,
                        "pid": snapshot.pid,
                        "name": snapshot.name,
                        "cpu_percent": snapshot.cpu_percent,
                        "rss_bytes": snapshot.rss_bytes,
                        "peak_rss_bytes": snapshot.peak_rss_bytes,
                        "vm_bytes": snapshot.vm_bytes,
                        "peak_vm_bytes": snapshot.peak_vm_bytes,
                        "fd_slots": snapshot.fd_slots,
                        "threads": snapshot.threads,
                        "user_ticks": snapshot.user_ticks,
                        "kernel_ticks": snapshot.kernel_ticks,
                        "system_ticks": snapshot.system_ticks,
                    }
                )
        rows.sort(key=lambda row: (row["tick"], row["pid"]))
        return rows

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "root_pid": self.root_pid,
            "command": list(self.command),
            "interval_seconds": self.interval_seconds,
            "ticks_completed": self.ticks_completed,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
            "incomplete": self.incomplete,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_seconds": self.duration_seconds,
            "exit_code": self.exit_code,
            "process_count": len(self.summaries),
            "errors": list(self.errors),
            "cleanup_errors": list(self.cleanup_errors),
        }
