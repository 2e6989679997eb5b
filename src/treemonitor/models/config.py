"""
Configuration data models.

Structures produced by the configuration loader from ``config.toml``.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..config.storage_config import StorageConfig


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # [monitor.general]
    log_root_dir: Path
    verbose: bool
    save_results: bool

    # [monitor.collection]
    interval_seconds: float
    duration_seconds: float
    proc_root: Path
    children_source: str  # "psutil" or "pgrep"

    # [monitor.shutdown]
    graceful_shutdown_timeout: float

    # [monitor.storage]
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    # The file the settings were read from.
    config_path: Path
