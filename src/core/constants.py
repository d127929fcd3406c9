"""Core constants used across CrumbDB modules.

This module centralizes file naming and buffer sizing values.
Keeping values here avoids magic literals in store logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".crumbdb")
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
COLLECTION_FILE_EXTENSION = ".json"
COLLECTION_FILE_GLOB = f"*{COLLECTION_FILE_EXTENSION}"
COPY_NAME_SEPARATOR = "_"
RECORD_ID_FIELD = "id"

# (inclusive upper file size, buffer size) in ascending order.
BUFFER_SIZE_TIERS = (
    (64 * 1024, 4 * 1024),
    (1 * 1024 * 1024, 8 * 1024),
    (16 * 1024 * 1024, 16 * 1024),
    (128 * 1024 * 1024, 32 * 1024),
)
LARGEST_BUFFER_SIZE = 64 * 1024
SMALLEST_BUFFER_SIZE = BUFFER_SIZE_TIERS[0][1]
