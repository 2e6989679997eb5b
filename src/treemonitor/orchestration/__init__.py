"""
Orchestration of a monitoring run: workload launch and signal handling.
"""

from .runner import MonitorRunner
from .signal_handler import SignalHandler

__all__ = ["MonitorRunner", "SignalHandler"]
