"""
Data models for the monitoring system.

Configuration Models:
- Application-wide and monitor settings

Sampling Models:
- Per-tick process snapshots and per-process histories

Result Models:
- Usage summaries and the outcome of a monitoring run
"""

# Configuration models
from .config import AppConfig, MonitorConfig

# Sampling models
from .snapshots import ProcessHistory, ProcessSnapshot

# Result models
from .results import MonitoringResults, StopReason, UsageSummary

__all__ = [
    # Configuration
    "AppConfig",
    "MonitorConfig",
    # Sampling
    "ProcessHistory",
    "ProcessSnapshot",
    # Results
    "MonitoringResults",
    "StopReason",
    "UsageSummary",
]
