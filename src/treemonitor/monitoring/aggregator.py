"""
Reduction of per-process histories into usage summaries.
"""

from typing import Dict, Mapping

from ..models.results import UsageSummary
from ..models.snapshots import ProcessHistory


def summarize_history(history: ProcessHistory) -> UsageSummary:
    """
    Summarize one non-empty history.

    First observations carry a CPU% of 0 and count towards the average.
    Memory averages are truncated to whole bytes.

    Raises:
        ValueError: If the history has no snapshots.
    """
    snapshots = history.snapshots
    count = len(snapshots)
    if count == 0:
        raise ValueError(f"cannot summarize empty history of pid {history.pid}")

    return UsageSummary(
        pid=history.pid,
        name=history.name,
        avg_cpu_percent=sum(s.cpu_percent for s in snapshots) / count,
        avg_rss_bytes=sum(s.rss_bytes for s in snapshots) // count,
        peak_rss_bytes=max(s.rss_bytes for s in snapshots),
        lifetime_ticks=count,
        avg_vm_bytes=sum(s.vm_bytes for s in snapshots) // count,
        peak_vm_bytes=max(s.peak_vm_bytes for s in snapshots),
        first_tick=snapshots[0].tick,
        last_tick=snapshots[-1].tick,
    )


def summarize(histories: Mapping[int, ProcessHistory]) -> Dict[int, UsageSummary]:
    """Summarize every history with at least one snapshot, keyed by pid."""
    return {
        pid: summarize_history(history)
        for pid, history in histories.items()
        if len(history) > 0
    }
