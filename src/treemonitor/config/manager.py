"""
Process-wide access to the loaded configuration.

config.toml is read and validated on the first get_config() call and the
result is cached until the path changes or the cache is cleared.
"""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, ValidationError, handle_config_error
from .loader import load_main_config
from .validators import validate_monitor_config

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None

# <repo>/conf/config.toml; the CLI's --config and the tests point elsewhere.
_CONFIG_FILE_PATH = Path(__file__).resolve().parents[3] / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """Use ``config_path`` from now on; drops any cached configuration."""
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Using configuration file: {config_path}")


def clear_config_cache() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    try:
        monitor_config = validate_monitor_config(load_main_config(config_path).get("monitor", {}))
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.CRITICAL,
            logger=logger,
        )
        raise

    logger.info(
        f"Loaded configuration: interval={monitor_config.interval_seconds}s, "
        f"duration={monitor_config.duration_seconds}s, "
        f"children_source={monitor_config.children_source}, "
        f"storage={monitor_config.storage.format}"
    )
    return AppConfig(monitor=monitor_config, config_path=config_path)


def get_config() -> AppConfig:
    """
    Return the application configuration, loading it on first use.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If a value is rejected
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> dict:
    """Where the configuration comes from and a few of its loaded values."""
    monitor = _CONFIG.monitor if _CONFIG else None
    return {
        "config_loaded": monitor is not None,
        "config_path": str(_CONFIG_FILE_PATH),
        "interval_seconds": monitor.interval_seconds if monitor else None,
        "storage_format": monitor.storage.format if monitor else None,
    }
