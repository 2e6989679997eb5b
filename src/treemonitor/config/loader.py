"""
Reading config.toml from disk.

Errors propagate unlogged; the configuration manager reports them once.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Top-level tables understood by the application.
KNOWN_TABLES = ("monitor",)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file into a dictionary.

    Raises:
        FileNotFoundError: If ``file_path`` is not a file
        tomllib.TOMLDecodeError: If the file is malformed
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.debug(f"Reading {description} from {file_path}")
    return tomllib.loads(file_path.read_text(encoding="utf-8"))


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Load config.toml; unknown top-level tables are reported and ignored."""
    data = load_toml_file(config_path, "main configuration file")
    for table in sorted(set(data) - set(KNOWN_TABLES)):
        logger.warning(f"Ignoring unknown table [{table}] in {config_path}")
    return data
