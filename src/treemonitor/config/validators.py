"""
Configuration validation utilities.

Turns the raw ``[monitor]`` tables of ``config.toml`` into a validated
MonitorConfig.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import MonitorConfig
from ..validation import (
    ValidationError,
    validate_duration,
    validate_enum_choice,
    validate_positive_float,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

CHILDREN_SOURCES = ["psutil", "pgrep"]


def _validate_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean", field_name=field_name, value=value)
    return value


def _validate_non_empty_path(value: Any, field_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string", field_name=field_name, value=value
        )
    return Path(value.strip())


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw ``[monitor]`` table from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = monitor_data.get("general", {})
    collection_settings = monitor_data.get("collection", {})
    shutdown_settings = monitor_data.get("shutdown", {})
    storage_settings = monitor_data.get("storage", {})

    try:
        # Validate general settings
        log_root_dir = _validate_non_empty_path(
            general_settings.get("log_root_dir", "logs"), "monitor.general.log_root_dir"
        )
        verbose = _validate_bool(general_settings.get("verbose", False), "monitor.general.verbose")
        save_results = _validate_bool(
            general_settings.get("save_results", True), "monitor.general.save_results"
        )

        # Validate collection settings
        interval_seconds = validate_positive_float(
            collection_settings.get("interval_seconds", 1.0),
            min_value=1.0,  # no sub-second sampling
            max_value=60.0,
            field_name="monitor.collection.interval_seconds",
        )

        duration_seconds = validate_duration(
            collection_settings.get("duration_seconds", 10.0),
            min_seconds=0.0,
            field_name="monitor.collection.duration_seconds",
        )

        proc_root = _validate_non_empty_path(
            collection_settings.get("proc_root", "/proc"), "monitor.collection.proc_root"
        )

        children_source = validate_enum_choice(
            collection_settings.get("children_source", "psutil"),
            valid_choices=CHILDREN_SOURCES,
            field_name="monitor.collection.children_source",
        )

        # Validate shutdown settings
        graceful_shutdown_timeout = validate_positive_float(
            shutdown_settings.get("graceful_shutdown_timeout", 3.0),
            min_value=0.1,  # 100ms minimum
            max_value=60.0,
            field_name="monitor.shutdown.graceful_shutdown_timeout",
        )

        # Validate storage settings
        try:
            storage = StorageConfig.from_dict(storage_settings)
        except ValueError as e:
            raise ValidationError(f"monitor.storage: {e}", field_name="monitor.storage")

        return MonitorConfig(
            # from [monitor.general]
            log_root_dir=log_root_dir,
            verbose=verbose,
            save_results=save_results,
            # from [monitor.collection]
            interval_seconds=interval_seconds,
            duration_seconds=duration_seconds,
            proc_root=proc_root,
            children_source=children_source,
            # from [monitor.shutdown]
            graceful_shutdown_timeout=graceful_shutdown_timeout,
            # from [monitor.storage]
            storage=storage,
        )

    except ValidationError as e:
        logger.error(f"Monitor configuration validation failed: {e}")
        raise
