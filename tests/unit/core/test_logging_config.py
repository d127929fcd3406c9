"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json

from core.logging_config import configure_logging, get_logger


def test_logger_renders_json_to_stderr(capsys) -> None:
    """Events should be rendered as JSON lines on stderr."""
    configure_logging("info")
    logger = get_logger("tests.logging")

    logger.info("collection_dropped", path="person.json")

    captured = capsys.readouterr()
    payload = json.loads(captured.err.strip().splitlines()[-1])
    assert payload["event"] == "collection_dropped" and payload["path"] == "person.json"
    assert captured.out == ""


def test_logger_filters_below_configured_level(capsys) -> None:
    configure_logging("error")
    logger = get_logger("tests.logging")

    logger.info("collection_purged")
    configure_logging("info")

    assert capsys.readouterr().err == ""
