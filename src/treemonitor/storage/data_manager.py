"""
Data storage manager for monitoring results.

This module writes the output of one monitoring run into its own directory
using the configured storage format.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

from ..config.storage_config import StorageConfig
from ..models.results import MonitoringResults
from .factory import create_storage

logger = logging.getLogger(__name__)

SAMPLES_BASENAME = "process_samples"

# Column types of the per-tick sample table.
SAMPLE_SCHEMA: Dict[str, Any] = {
    "tick": pl.Int64,
    "timestamp": pl.Float64,
    "pid": pl.Int64,
    "name": pl.Utf8,
    "cpu_percent": pl.Float64,
    "rss_bytes": pl.Int64,
    "peak_rss_bytes": pl.Int64,
    "vm_bytes": pl.Int64,
    "peak_vm_bytes": pl.Int64,
    "fd_slots": pl.Int64,
    "threads": pl.Int64,
    "user_ticks": pl.Int64,
    "kernel_ticks": pl.Int64,
    "system_ticks": pl.Int64,
}


def create_run_directory(log_root_dir: Path, started_at: Optional[float] = None) -> Path:
    """Create and return ``<log_root_dir>/run_<YYYYmmdd_HHMMSS>``."""
    moment = datetime.fromtimestamp(started_at) if started_at else datetime.now()
    run_dir = Path(log_root_dir) / f"run_{moment.strftime('%Y%m%d_%H%M%S')}"
    suffix = 1
    while run_dir.exists():
        run_dir = Path(log_root_dir) / f"run_{moment.strftime('%Y%m%d_%H%M%S')}_{suffix}"
        suffix += 1
    run_dir.mkdir(parents=True)
    return run_dir


class DataStorageManager:
    """
    Saves and loads the files of one monitoring run.

    Files written to ``output_dir``:
    - ``process_samples.parquet`` or ``process_samples.json``: one row per
      process and tick
    - ``process_samples.csv``: when legacy formats are enabled
    - ``usage_summary.json``: the per-process usage summaries
    - ``metadata.json``: how the run was configured and how it ended
    - ``summary.log``: the human-readable report
    """

    def __init__(self, output_dir: Path, storage_config: Optional[StorageConfig] = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        storage_config = storage_config or StorageConfig()
        self.storage_format = storage_config.format
        self.compression = storage_config.compression
        self.generate_legacy = storage_config.generate_legacy_formats

        self.storage = create_storage(self.storage_format, self.compression)

        logger.debug(
            f"Initialized DataStorageManager with format: {self.storage_format}"
        )

    @property
    def samples_path(self) -> Path:
        extension = "parquet" if self.storage_format == "parquet" else "json"
        return self.output_dir / f"{SAMPLES_BASENAME}.{extension}"

    def save_monitoring_results(self, results: MonitoringResults, report: str = "") -> None:
        """
        Save complete monitoring results to storage.

        Args:
            results: Outcome of the run, with summaries filled in
            report: Rendered report text for ``summary.log``

        Raises:
            OSError, polars.exceptions.PolarsError: If any write fails
        """
        try:
            logger.info("Saving monitoring results...")

            self._save_process_samples(results.to_sample_rows())
            self._save_usage_summary(results)
            self._save_metadata(results)
            self._save_summary_log(results, report)

            logger.info(f"Successfully saved monitoring results to: {self.output_dir}")

        except (OSError, pl.exceptions.PolarsError) as e:
            logger.error(f"Error saving monitoring results: {e}", exc_info=True)
            raise

    def _save_process_samples(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            logger.warning("No process samples to save")
            return

        df = pl.DataFrame(rows, schema=SAMPLE_SCHEMA)
        self.storage.save_dataframe(df, str(self.samples_path))
        logger.info(f"Saved {len(rows)} process samples to: {self.samples_path}")

        if self.generate_legacy:
            legacy_path = self.output_dir / f"{SAMPLES_BASENAME}.csv"
            df.write_csv(legacy_path)
            logger.info(f"Saved legacy CSV format to: {legacy_path}")

    def _save_usage_summary(self, results: MonitoringResults) -> None:
        data = {
            "incomplete": results.incomplete,
            "processes": [results.summaries[pid].to_dict() for pid in sorted(results.summaries)],
        }
        path = self.output_dir / "usage_summary.json"
        self.storage.save_dict(data, str(path))
        logger.debug(f"Saved usage summary to: {path}")

    def _save_metadata(self, results: MonitoringResults) -> None:
        metadata = results.to_metadata()
        metadata["storage_format"] = self.storage_format
        path = self.output_dir / "metadata.json"
        self.storage.save_dict(metadata, str(path))
        logger.debug(f"Saved metadata to: {path}")

    def _save_summary_log(self, results: MonitoringResults, report: str) -> None:
        summary_path = self.output_dir / "summary.log"

        with open(summary_path, "w", encoding="utf-8") as f:
            f.write("Process Tree Monitoring Summary\n")
            f.write("===============================\n\n")
            f.write(f"Command: {' '.join(results.command) or '-'}\n")
            f.write(f"Root PID: {results.root_pid}\n")
            f.write(f"Interval: {results.interval_seconds}s\n")
            f.write(f"Ticks Completed: {results.ticks_completed}\n")
            stop_reason = results.stop_reason.value if results.stop_reason else "error"
            f.write(f"Stop Reason: {stop_reason}\n")
            if results.exit_code is not None:
                f.write(f"Exit Code: {results.exit_code}\n")
            f.write(f"Processes Observed: {len(results.summaries)}\n\n")

            if report:
                f.write(report)
                f.write("\n")

            if results.errors:
                f.write("\n--- Errors ---\n")
                for error in results.errors:
                    f.write(f"{error}\n")

        logger.info(f"Saved summary log to: {summary_path}")

    def get_storage_info(self) -> Dict[str, Any]:
        """Describe the storage configuration and the files present."""
        info = {
            "storage_format": self.storage_format,
            "compression": self.compression,
            "output_dir": str(self.output_dir),
            "files": {},
        }

        for filename in [
            f"{SAMPLES_BASENAME}.parquet",
            f"{SAMPLES_BASENAME}.json",
            f"{SAMPLES_BASENAME}.csv",
            "usage_summary.json",
            "metadata.json",
            "summary.log",
        ]:
            file_path = self.output_dir / filename
            if file_path.exists():
                info["files"][filename] = {
                    "size_bytes": self.storage.get_file_size(str(file_path)),
                    "exists": True,
                }

        return info
