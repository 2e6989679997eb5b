"""
treemonitor: CPU and memory usage of a process tree over time.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Snapshots, histories, summaries and run results
- validation: Input validation and error handling
- system: /proc readers, process-tree discovery and termination
- monitoring: The sampler, the aggregator and report formatting
- storage: Per-run output files
- orchestration: Workload launch and signal handling
- cli: Command-line interface

Usage:
    From command line:
        treemonitor -d 30s -- make -j8

    Programmatically:
        from treemonitor import Sampler
        results = Sampler(pid, interval_seconds=1.0, max_ticks=10).run()
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .orchestration import MonitorRunner
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    MonitorConfig,
    MonitoringResults,
    ProcessHistory,
    ProcessSnapshot,
    StopReason,
    UsageSummary,
)

# Sampling
from .monitoring import Sampler, SamplerState, format_report, summarize

# Validation utilities
from .validation import ValidationError

# System components
from .system import (
    MonitorError,
    ParseError,
    ProcessGoneError,
    ProcessSnapshotReader,
    ProcessTreeWalker,
    ProcTimeSource,
    ReadError,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "MonitorRunner",
    "main_cli",
    # Models
    "AppConfig",
    "MonitorConfig",
    "MonitoringResults",
    "ProcessHistory",
    "ProcessSnapshot",
    "StopReason",
    "UsageSummary",
    # Sampling
    "Sampler",
    "SamplerState",
    "format_report",
    "summarize",
    # Errors
    "ValidationError",
    "MonitorError",
    "ParseError",
    "ProcessGoneError",
    "ReadError",
    # System components
    "ProcessSnapshotReader",
    "ProcessTreeWalker",
    "ProcTimeSource",
]
