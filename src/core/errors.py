"""CrumbDB exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class CrumbError(Exception):
    """Base exception for all CrumbDB failures."""


class CrumbConfigError(CrumbError):
    """Raised for invalid runtime configuration."""


class CrumbStoreError(CrumbError):
    """Raised for collection store and directory failures."""


class CrumbIOError(CrumbStoreError):
    """Raised when a collection file cannot be read or written."""


class CrumbDeserializationError(CrumbStoreError):
    """Raised for malformed or type-mismatched collection content."""


class CrumbSerializationError(CrumbStoreError):
    """Raised when a record holds a value that cannot be encoded."""
