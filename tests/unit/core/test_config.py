"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import CrumbConfig
from core.errors import CrumbConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("CRUMBDB_DATA_ROOT", "./.tmp-crumbdb")

    config = CrumbConfig.from_env()

    assert config.data_root.name == ".tmp-crumbdb" and config.data_root.is_absolute()


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fall back to the default root and info level."""
    monkeypatch.delenv("CRUMBDB_DATA_ROOT", raising=False)
    monkeypatch.delenv("CRUMBDB_LOG_LEVEL", raising=False)

    config = CrumbConfig.from_env()

    assert config.data_root.name == ".crumbdb"
    assert config.log_level == "info"


def test_from_env_normalizes_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Log level should be case-insensitive."""
    monkeypatch.setenv("CRUMBDB_LOG_LEVEL", "DEBUG")

    assert CrumbConfig.from_env().log_level == "debug"


def test_from_env_raises_for_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for an unknown log level."""
    monkeypatch.setenv("CRUMBDB_LOG_LEVEL", "loud")

    with pytest.raises(CrumbConfigError, match="CRUMBDB_LOG_LEVEL"):
        CrumbConfig.from_env()


def test_from_env_raises_for_blank_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a blank data root."""
    monkeypatch.setenv("CRUMBDB_DATA_ROOT", "  ")

    with pytest.raises(CrumbConfigError, match="CRUMBDB_DATA_ROOT"):
        CrumbConfig.from_env()
