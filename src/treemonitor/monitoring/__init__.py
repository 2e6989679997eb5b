"""
Process-tree sampling, aggregation and reporting.
"""

from ..models.results import StopReason
from .aggregator import summarize, summarize_history
from .report import format_report, format_summary_line, format_tick_usage
from .sampler import Sampler, SamplerState, compute_cpu_percent

__all__ = [
    "Sampler",
    "SamplerState",
    "StopReason",
    "compute_cpu_percent",
    "summarize",
    "summarize_history",
    "format_report",
    "format_summary_line",
    "format_tick_usage",
]
