"""
Abstract base class for data storage implementations.

Defines what the per-run output writer needs from a backend: writing the
per-tick sample table as a Polars DataFrame and small dictionaries (the usage
summary and run metadata).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import polars as pl


class DataStorage(ABC):
    """Abstract base class for data storage implementations."""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """Save a Polars DataFrame to the specified path."""
        pass

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """Save dictionary data to the specified path."""
        pass

    @abstractmethod
    def get_file_size(self, path: str) -> int:
        pass
