"""
File backends for a run's sample table and its JSON side files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Literal

import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


def _prepare(path: str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


class ParquetStorage(DataStorage):
    """
    Sample tables as Parquet, dictionaries as indented JSON.

    A run's table fits in memory, so it is written in one piece.
    """

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        try:
            df.write_parquet(_prepare(path), compression=self.compression)
        except (OSError, pl.exceptions.PolarsError) as e:
            logger.error(f"Could not write {len(df)} sample rows to {path}: {e}")
            raise
        logger.debug(f"Wrote {len(df)} sample rows to {path} ({self.compression})")

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        try:
            with open(_prepare(path), "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.error(f"Could not write {path}: {e}")
            raise
        logger.debug(f"Wrote {path}")

    def get_file_size(self, path: str) -> int:
        """Size in bytes, 0 for a missing file."""
        target = Path(path)
        return target.stat().st_size if target.is_file() else 0


class JsonStorage(ParquetStorage):
    """Sample tables as a JSON ``{"samples": [row, ...]}`` document."""

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        self.save_dict({"samples": df.to_dicts()}, path)
