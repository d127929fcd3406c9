"""Runtime configuration model for CrumbDB.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_LOG_LEVEL, SUPPORTED_LOG_LEVELS
from core.errors import CrumbConfigError


@dataclass(frozen=True)
class CrumbConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Folder holding one JSON file per collection.
        log_level: Minimum structlog level name.
    """

    data_root: Path
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "CrumbConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CrumbConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("CRUMBDB_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        log_level_value = os.getenv("CRUMBDB_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            data_root=_parse_data_root(data_root_value),
            log_level=_parse_log_level(log_level_value),
        )


def _parse_data_root(raw_value: str) -> Path:
    """Parse the data root environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Absolute data root path.

    Raises:
        CrumbConfigError: If value is blank.
    """
    if not raw_value.strip():
        raise CrumbConfigError(
            "Invalid CRUMBDB_DATA_ROOT value: expected a folder path, got an empty string. "
            "Unset CRUMBDB_DATA_ROOT or point it at a writable folder."
        )
    return Path(raw_value).expanduser().resolve()


def _parse_log_level(raw_value: str) -> str:
    """Parse the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Normalized lowercase level name.

    Raises:
        CrumbConfigError: If level is not supported.
    """
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise CrumbConfigError(
            "Invalid CRUMBDB_LOG_LEVEL value: "
            f"expected one of {', '.join(SUPPORTED_LOG_LEVELS)}, got '{raw_value}'. "
            "Set CRUMBDB_LOG_LEVEL to a supported level name."
        )
    return level
