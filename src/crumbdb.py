"""Public SDK surface for CrumbDB.

This module provides a stable import path for library users.
It re-exports the database entry point, record base, and errors.
"""

from __future__ import annotations

from core.config import CrumbConfig
from core.errors import (
    CrumbConfigError,
    CrumbDeserializationError,
    CrumbError,
    CrumbIOError,
    CrumbSerializationError,
    CrumbStoreError,
)
from core.types import Identified, Record, record_key, same_identity
from store.buffer_policy import select_buffer_size
from store.collection_store import Collection
from store.database import Database, open_database

__all__ = [
    "Collection",
    "CrumbConfig",
    "CrumbConfigError",
    "CrumbDeserializationError",
    "CrumbError",
    "CrumbIOError",
    "CrumbSerializationError",
    "CrumbStoreError",
    "Database",
    "Identified",
    "Record",
    "open_database",
    "record_key",
    "same_identity",
    "select_buffer_size",
]
