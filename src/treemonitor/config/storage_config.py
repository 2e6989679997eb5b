"""
Options for the files a monitoring run leaves behind.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal

SUPPORTED_FORMATS = ("parquet", "json")
SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    The ``[monitor.storage]`` table.

    Attributes:
        format: How ``process_samples`` is written; 'parquet' or 'json'.
        compression: Parquet codec, one of SUPPORTED_COMPRESSIONS. Not
            checked, and not used, when the format is 'json'.
        generate_legacy_formats: Write ``process_samples.csv`` as well.
    """

    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    generate_legacy_formats: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Build a StorageConfig from a raw table, filling in defaults.

        Raises:
            ValueError: For an unknown format or codec, or a non-boolean
                ``generate_legacy_formats``.
        """
        config = cls(**{key: config_dict[key] for key in cls.__dataclass_fields__ if key in config_dict})

        if config.format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported storage format: {config.format} (expected one of {SUPPORTED_FORMATS})"
            )
        if config.format == "parquet" and config.compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {config.compression}")
        if not isinstance(config.generate_legacy_formats, bool):
            raise ValueError("generate_legacy_formats must be a boolean")
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
