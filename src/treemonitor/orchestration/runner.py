"""
Launching and monitoring a workload command.

MonitorRunner starts the command, samples its process tree until the run
ends, stops whatever is still running, reaps the workload and saves the
per-run output.
"""

import logging
import subprocess
import threading
from pathlib import Path
from typing import Iterable, List, Optional

import polars as pl

from ..models.config import MonitorConfig
from ..models.results import MonitoringResults
from ..models.snapshots import ProcessSnapshot
from ..monitoring.report import format_report, format_tick_usage
from ..monitoring.sampler import Sampler
from ..storage import DataStorageManager, create_run_directory
from ..system import (
    PgrepChildEnumerator,
    ProcessSnapshotReader,
    ProcessTreeWalker,
    ProcTimeSource,
    PsutilChildEnumerator,
    check_pgrep_installed,
    terminate_processes,
)
from ..validation import ErrorSeverity, ValidationError, handle_error
from .signal_handler import SignalHandler

logger = logging.getLogger(__name__)


class MonitorRunner:
    """
    Runs one command under monitoring.

    Attributes:
        command: The workload command and its arguments.
        config: Monitor settings.
        output_dir: Directory for this run's files; a new ``run_<timestamp>``
                    directory under ``config.log_root_dir`` when not given.
        shutdown_requested: Set by SIGINT/SIGTERM to stop sampling early.
    """

    def __init__(
        self,
        command: List[str],
        config: MonitorConfig,
        output_dir: Optional[Path] = None,
        shutdown_requested: Optional[threading.Event] = None,
    ):
        if not command:
            raise ValidationError("No command to monitor", field_name="command")
        self.command = list(command)
        self.config = config
        self.output_dir = Path(output_dir) if output_dir else None
        self.shutdown_requested = shutdown_requested or threading.Event()
        self.process: Optional[subprocess.Popen] = None

    def build_walker(self) -> ProcessTreeWalker:
        if self.config.children_source == "pgrep":
            if not check_pgrep_installed():
                raise ValidationError(
                    "children_source is 'pgrep' but pgrep is not installed",
                    field_name="monitor.collection.children_source",
                    value="pgrep",
                )
            return ProcessTreeWalker(PgrepChildEnumerator())
        return ProcessTreeWalker(PsutilChildEnumerator())

    def build_sampler(self, root_pid: int, walker: Optional[ProcessTreeWalker] = None) -> Sampler:
        time_source = ProcTimeSource(self.config.proc_root)
        return Sampler(
            root_pid,
            interval_seconds=self.config.interval_seconds,
            duration_seconds=self.config.duration_seconds,
            walker=walker or self.build_walker(),
            reader=ProcessSnapshotReader(self.config.proc_root, time_source),
            time_source=time_source,
            terminator=self._terminate_tree,
            cancel_event=self.shutdown_requested,
            on_tick=self._log_tick if self.config.verbose else None,
            shutdown_timeout=self.config.graceful_shutdown_timeout,
        )

    def start_workload(self) -> subprocess.Popen:
        """
        Start the workload command.

        Raises:
            FileNotFoundError: If the executable does not exist
            OSError: If the command cannot be started
        """
        logger.info(f"Starting workload: {' '.join(self.command)}")
        self.process = subprocess.Popen(self.command)
        logger.info(f"Workload started with PID: {self.process.pid}")
        return self.process

    def run(self) -> MonitoringResults:
        """Execute the whole launch, monitor, cleanup and save lifecycle."""
        # Fails before launching when the child source is unusable.
        walker = self.build_walker()
        with SignalHandler(self.shutdown_requested):
            process = self.start_workload()
            try:
                sampler = self.build_sampler(process.pid, walker)
                results = sampler.run()
            finally:
                exit_code = self._reap(process)

        results.command = list(self.command)
        results.exit_code = exit_code
        logger.info(f"Workload PID {process.pid} finished with exit code {exit_code}")

        if self.config.save_results:
            self.save_results(results)
        return results

    def save_results(self, results: MonitoringResults) -> Optional[Path]:
        """
        Write the run's files. A storage failure is logged and recorded on the
        results, it never hides the report.
        """
        try:
            if self.output_dir is None:
                self.output_dir = create_run_directory(self.config.log_root_dir, results.started_at)
            manager = DataStorageManager(self.output_dir, self.config.storage)
            manager.save_monitoring_results(results, format_report(results))
            files = manager.get_storage_info()["files"]
            total_bytes = sum(entry["size_bytes"] for entry in files.values())
            logger.info(f"Run output: {', '.join(sorted(files))} ({total_bytes} bytes)")
            return self.output_dir
        except (OSError, pl.exceptions.PolarsError) as e:
            handle_error(
                error=e,
                context="saving monitoring results",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            results.errors.append(f"saving results failed: {e}")
            return None

    def _terminate_tree(self, pids: Iterable[int], timeout: float) -> List[str]:
        # The root is our child: stop it through Popen so its exit status is
        # not reaped by psutil.
        root_pid = self.process.pid if self.process else None
        failures = terminate_processes([pid for pid in pids if pid != root_pid], timeout)
        if self.process is not None:
            failures.extend(self._stop_workload(self.process, timeout))
        return failures

    def _stop_workload(self, process: subprocess.Popen, timeout: float) -> List[str]:
        if process.poll() is not None:
            return []
        logger.info(f"Terminating workload PID {process.pid}")
        process.terminate()
        try:
            process.wait(timeout=timeout)
            return []
        except subprocess.TimeoutExpired:
            logger.warning(f"Workload PID {process.pid} did not terminate gracefully, killing...")
            process.kill()
        try:
            process.wait(timeout=timeout)
            return []
        except subprocess.TimeoutExpired:
            return [f"PID {process.pid}: still running after SIGKILL"]

    def _reap(self, process: subprocess.Popen) -> Optional[int]:
        if process.poll() is None:
            self._stop_workload(process, self.config.graceful_shutdown_timeout)
        return process.poll()

    @staticmethod
    def _log_tick(tick: int, snapshots: List[ProcessSnapshot]) -> None:
        logger.info(f"Tick {tick}: {len(snapshots)} processes")
        for line in format_tick_usage(snapshots):
            logger.info(line)
