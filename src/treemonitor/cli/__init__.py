"""
Command-line interface for the treemonitor package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
