"""
Human-readable rendering of sampling output.

One summary line per observed process, and for verbose runs one line per
process and tick with its raw counters.
"""

from typing import Iterable, List

from ..models.results import MonitoringResults, StopReason, UsageSummary
from ..models.snapshots import ProcessSnapshot
from ..system.sizes import format_size

COLUMN_WIDTH = 16

_INCOMPLETE_REASONS = {
    StopReason.WORKLOAD_EXITED: "workload exited prematurely",
    StopReason.SYSTEM_SOURCE_FAILED: "system CPU time source failed",
    StopReason.CANCELLED: "monitoring was cancelled",
}


def pad(text: str, width: int = COLUMN_WIDTH) -> str:
    return text.ljust(width)


def format_summary_line(summary: UsageSummary, interval_seconds: float = 1.0) -> str:
    seconds_alive = summary.lifetime_ticks * interval_seconds
    return (
        f"{summary.name}({summary.pid}): seconds alive: {seconds_alive:g}  "
        f"avg CPU: {int(summary.avg_cpu_percent)}%  "
        f"avg Mem: {format_size(summary.avg_rss_bytes)}  "
        f"peak Mem: {format_size(summary.peak_rss_bytes)}"
    )


def format_report(results: MonitoringResults) -> str:
    """
    Render the end-of-run report: an annotation for runs that ended early,
    then one line per process sorted by pid, then any cleanup failures.
    """
    lines: List[str] = []
    if results.incomplete:
        reason = _INCOMPLETE_REASONS.get(results.stop_reason, str(results.stop_reason))
        lines.append(
            f"Incomplete run: {reason} after {results.ticks_completed} ticks; "
            f"statistics cover the observed ticks only"
        )

    for pid in sorted(results.summaries):
        lines.append(format_summary_line(results.summaries[pid], results.interval_seconds))

    for failure in results.cleanup_errors:
        lines.append(f"Cleanup failed: {failure}")
    return "\n".join(lines)


def format_tick_usage(snapshots: Iterable[ProcessSnapshot]) -> List[str]:
    """Per-process lines for one tick, in the column layout of verbose mode."""
    return [
        "Pid: {} Name: {} CPU: {} FDSize: {} VmPeak: {} VmSize: {} VmHWM: {} VmRSS: {} Threads: {}".format(
            pad(str(s.pid)),
            pad(s.name),
            pad(f"{int(s.cpu_percent)}%"),
            pad(str(s.fd_slots)),
            pad(format_size(s.peak_vm_bytes)),
            pad(format_size(s.vm_bytes)),
            pad(format_size(s.peak_rss_bytes)),
            pad(format_size(s.rss_bytes)),
            pad(str(s.threads)),
        )
        for s in snapshots
    ]
