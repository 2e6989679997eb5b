"""
Storage of per-run monitoring output.

Sample tables are written with Polars, as compressed Parquet by default or as
JSON rows; summaries and metadata are JSON. Output never spans runs: every run
gets its own directory.
"""

from .base import DataStorage
from .data_manager import DataStorageManager, create_run_directory
from .factory import create_storage
from .parquet_storage import JsonStorage, ParquetStorage

__all__ = [
    "DataStorage",
    "DataStorageManager",
    "JsonStorage",
    "ParquetStorage",
    "create_run_directory",
    "create_storage",
]
