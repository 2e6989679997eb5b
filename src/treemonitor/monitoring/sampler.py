"""
Fixed-cadence sampling of a process tree.

The Sampler drives one tick at a time: walk the tree, read the system-wide
tick total once, read a snapshot of every live pid, derive CPU percentages
against each pid's previous snapshot and append to the per-pid histories.
It owns the pid -> ProcessHistory map of its run and hands it over, together
with the usage summaries, in a MonitoringResults when it stops.
"""

import logging
import threading
import time
from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..models.results import MonitoringResults, StopReason
from ..models.snapshots import ProcessHistory, ProcessSnapshot
from ..system.exceptions import ParseError, PidReuseAnomaly, ProcessGoneError, ReadError
from ..system.proc_time import ProcTimeSource
from ..system.process_reader import ProcessSnapshotReader
from ..system.process_tree import ProcessTreeWalker
from ..system.termination import terminate_processes
from .aggregator import summarize

logger = logging.getLogger(__name__)

# Receives the tick index and the snapshots recorded during that tick.
TickObserver = Callable[[int, List[ProcessSnapshot]], None]
Terminator = Callable[[Iterable[int], float], List[str]]


class SamplerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


def compute_cpu_percent(previous: Optional[ProcessSnapshot], current: ProcessSnapshot) -> float:
    """
    CPU utilization of a process between two snapshots, in percent.

    The share of all system ticks (over all cores) spent by the process, so a
    multi-threaded process can exceed 100. Zero for a first observation or
    when the system tick total did not advance.
    """
    if previous is None:
        return 0.0
    system_delta = current.system_ticks - previous.system_ticks
    if system_delta <= 0:
        return 0.0
    return 100.0 * (current.cpu_ticks - previous.cpu_ticks) / system_delta


class Sampler:
    """
    Samples a root process and its descendants until the run ends.

    A Sampler runs once: IDLE -> RUNNING -> STOPPED. The run ends when the
    window is over (``max_ticks`` ticks or ``duration_seconds``), when the
    root exits, when the system tick source fails, or when ``cancel_event``
    is set. Cancellation is only observed between ticks and while sleeping,
    so a tick is either fully recorded or not at all.

    Whatever the reason, stopping closes every history, asks the terminator
    to stop the root and the pids of the last walk, and summarizes the
    histories.
    """

    def __init__(
        self,
        root_pid: int,
        interval_seconds: float = 1.0,
        duration_seconds: Optional[float] = None,
        max_ticks: Optional[int] = None,
        walker: Optional[ProcessTreeWalker] = None,
        reader: Optional[ProcessSnapshotReader] = None,
        time_source: Optional[ProcTimeSource] = None,
        terminator: Optional[Terminator] = None,
        cancel_event: Optional[threading.Event] = None,
        on_tick: Optional[TickObserver] = None,
        shutdown_timeout: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.root_pid = root_pid
        self.interval_seconds = interval_seconds
        self.duration_seconds = duration_seconds
        self.max_ticks = max_ticks
        self.time_source = time_source or ProcTimeSource()
        self.walker = walker or ProcessTreeWalker()
        self.reader = reader or ProcessSnapshotReader(time_source=self.time_source)
        self.terminator = terminator or terminate_processes
        self.cancel_event = cancel_event or threading.Event()
        self.on_tick = on_tick
        self.shutdown_timeout = shutdown_timeout
        self._clock = clock
        self._wall_clock = wall_clock

        self.state = SamplerState.IDLE
        self.stop_reason: Optional[StopReason] = None
        self.histories: Dict[int, ProcessHistory] = {}
        self._last_walk: Set[int] = set()

    def run(self) -> MonitoringResults:
        """
        Sample until the run ends and return its results.

        Raises:
            RuntimeError: If this Sampler already ran.
        """
        if self.state is not SamplerState.IDLE:
            raise RuntimeError(f"Sampler for PID {self.root_pid} has already run")
        self.state = SamplerState.RUNNING

        results = MonitoringResults(
            root_pid=self.root_pid,
            interval_seconds=self.interval_seconds,
            histories=self.histories,
            started_at=self._wall_clock(),
        )
        deadline = None
        if self.duration_seconds is not None:
            deadline = self._clock() + self.duration_seconds

        logger.info(
            f"Sampling PID {self.root_pid} every {self.interval_seconds}s "
            f"(duration: {self.duration_seconds}s, max ticks: {self.max_ticks})"
        )

        reason: Optional[StopReason] = None
        try:
            while reason is None:
                if self.cancel_event.is_set():
                    reason = StopReason.CANCELLED
                    break
                if self._window_over(results.ticks_completed, deadline):
                    reason = StopReason.DURATION_ELAPSED
                    break

                tick_start = self._clock()
                reason = self._tick(results)
                if reason is not None:
                    break
                if self._window_over(results.ticks_completed, deadline):
                    reason = StopReason.DURATION_ELAPSED
                    break

                elapsed = self._clock() - tick_start
                sleep_time = self.interval_seconds - elapsed
                if deadline is not None:
                    sleep_time = min(sleep_time, deadline - self._clock())
                if sleep_time > 0:
                    if self.cancel_event.wait(sleep_time):
                        reason = StopReason.CANCELLED
                elif elapsed > self.interval_seconds > 0:
                    logger.warning(
                        f"Tick {results.ticks_completed} took {elapsed:.3f}s, "
                        f"longer than the {self.interval_seconds}s interval"
                    )
        finally:
            self._stop(results, reason)

        return results

    def _window_over(self, ticks_completed: int, deadline: Optional[float]) -> bool:
        if self.max_ticks is not None and ticks_completed >= self.max_ticks:
            return True
        return deadline is not None and self._clock() >= deadline

    def _tick(self, results: MonitoringResults) -> Optional[StopReason]:
        """Run one tick. Returns a stop reason if the run must end instead."""
        tick = results.ticks_completed + 1

        pids = self.walker.descendants(self.root_pid)
        for error in self.walker.last_errors:
            results.errors.append(f"tick {tick}: {error}")
        if self.root_pid not in pids:
            logger.info(f"Workload PID {self.root_pid} exited prematurely before tick {tick}")
            return StopReason.WORKLOAD_EXITED
        self._last_walk = pids

        try:
            system_ticks = self.time_source.current_system_ticks()
        except ReadError as e:
            logger.error(f"System CPU time source failed at tick {tick}: {e}")
            results.errors.append(f"tick {tick}: {e}")
            return StopReason.SYSTEM_SOURCE_FAILED
        timestamp = self._wall_clock()

        snapshots: List[ProcessSnapshot] = []
        gone: Set[int] = set()
        for pid in sorted(pids):
            try:
                snapshots.append(self.reader.read_snapshot(pid, system_ticks))
            except ProcessGoneError as e:
                logger.debug(f"Skipping PID {pid} at tick {tick}: {e}")
                gone.add(pid)
            except ParseError as e:
                logger.error(f"Skipping PID {pid} at tick {tick}: {e}")
                results.errors.append(f"tick {tick}: {e}")

        recorded = [self._record(snapshot, tick, timestamp) for snapshot in snapshots]

        for pid, history in self.histories.items():
            if not history.closed and (pid not in pids or pid in gone):
                logger.debug(f"PID {pid} left the tree after {len(history)} ticks")
                history.close()

        results.ticks_completed = tick
        if self.on_tick is not None:
            self.on_tick(tick, recorded)
        return None

    def _record(self, snapshot: ProcessSnapshot, tick: int, timestamp: float) -> ProcessSnapshot:
        """Stamp a snapshot with its tick and CPU% and append it to its history."""
        pid = snapshot.pid
        history = self.histories.get(pid)
        previous = None

        if history is not None:
            if snapshot.counters_decreased_since(history.last):
                anomaly = PidReuseAnomaly(
                    f"counters of PID {pid} decreased at tick {tick} "
                    f"({history.name!r} -> {snapshot.name!r}), discarding {len(history)} "
                    f"earlier samples",
                    pid=pid,
                )
                logger.warning(f"Probable PID reuse: {anomaly}")
                history = None
            else:
                if history.closed:
                    logger.info(
                        f"PID {pid} back in the tree at tick {tick}, continuing its history"
                    )
                    history.reopen()
                previous = history.last

        stamped = replace(
            snapshot,
            tick=tick,
            timestamp=timestamp,
            cpu_percent=compute_cpu_percent(previous, snapshot),
        )
        if history is None:
            self.histories[pid] = ProcessHistory.start(stamped)
        else:
            history.append(stamped)
        return stamped

    def _stop(self, results: MonitoringResults, reason: Optional[StopReason]) -> None:
        self.state = SamplerState.STOPPED
        self.stop_reason = reason
        results.stop_reason = reason

        for history in self.histories.values():
            history.close()

        targets = {self.root_pid} | self._last_walk
        try:
            results.cleanup_errors.extend(self.terminator(targets, self.shutdown_timeout))
        except Exception as e:
            logger.error(f"Cleanup of PID {self.root_pid} tree failed: {e}", exc_info=True)
            results.cleanup_errors.append(f"{type(e).__name__}: {e}")

        results.summaries = summarize(self.histories)
        results.finished_at = self._wall_clock()

        stop_name = reason.value if reason else "error"
        logger.info(
            f"Sampling stopped ({stop_name}) after {results.ticks_completed} ticks, "
            f"{len(results.summaries)} processes observed"
        )
