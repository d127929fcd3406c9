"""Collection directory management.

This module maps record types to JSON files under one root folder.
It creates, lists, drops, purges, and copies collection files and
delegates loading to the collection store.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
import shutil
import threading

from core.config import CrumbConfig
from core.constants import COLLECTION_FILE_EXTENSION, COLLECTION_FILE_GLOB, COPY_NAME_SEPARATOR
from core.errors import CrumbIOError, CrumbStoreError
from core.logging_config import configure_logging, get_logger
from core.types import R
from store.collection_store import Collection
from store.record_codec import ensure_record_type

_LOGGER = get_logger(__name__)

_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)
_TICKS_PER_MICROSECOND = 10


class Database:
    """Directory of collection files, one per record type."""

    def __init__(self, root: Path) -> None:
        """Bind the database to a root folder.

        Args:
            root: Folder holding collection files.
        """
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def collection_names(self) -> list[str]:
        """Return names of existing collection files.

        Returns:
            Sorted file stems; empty when the root folder is absent.
        """
        if not self._root.is_dir():
            return []
        return sorted(path.stem for path in self._collection_files())

    def path_of(self, collection: type | str) -> Path:
        """Resolve a record type or collection name to its file path.

        Args:
            collection: Record class or plain collection name.

        Returns:
            ``<root>/<lowercased name>.json``.

        Raises:
            CrumbStoreError: If the name is not a valid file stem.
        """
        name = collection.__name__ if isinstance(collection, type) else str(collection)
        return self._root / f"{_validate_name(name).lower()}{COLLECTION_FILE_EXTENSION}"

    async def get_collection(self, record_type: type[R]) -> Collection[R]:
        """Ensure a collection file exists and load it into memory.

        Args:
            record_type: Record dataclass of the collection.

        Returns:
            Loaded collection bound to the resolved path.

        Raises:
            CrumbIOError: If the file cannot be created or read.
            CrumbDeserializationError: If the file content is malformed.
        """
        ensure_record_type(record_type)
        path = self.path_of(record_type)
        if not path.exists():
            try:
                path.touch()
            except OSError as error:
                raise CrumbIOError(
                    f"Failed to create collection file at {path}: {error.strerror or error}. "
                    "Open the database with open_database() so the root folder exists."
                ) from error
            _LOGGER.info("collection_created", path=str(path))
        return await Collection.load(path, record_type)

    def drop_collection(self, collection: type | str) -> bool:
        """Delete a collection file.

        Returns:
            True if the file existed and was deleted.
        """
        path = self.path_of(collection)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as error:
            raise _file_error("delete", path, error) from error
        _LOGGER.info("collection_dropped", path=str(path))
        return True

    async def purge_collection(self, collection: type | str) -> bool:
        """Truncate a collection file to zero bytes without deleting it.

        Returns:
            True if the file existed and was purged.
        """
        path = self.path_of(collection)
        if not path.is_file():
            return False
        await _truncate(path)
        _LOGGER.info("collection_purged", path=str(path))
        return True

    async def purge_collections(self) -> int:
        """Truncate every collection file in the root folder.

        Returns:
            Number of purged files.
        """
        if not self._root.is_dir():
            return 0
        purged = 0
        for path in self._collection_files():
            await _truncate(path)
            purged += 1
        _LOGGER.info("collections_purged", root=str(self._root), purged=purged)
        return purged

    def copy_collection(self, collection: type | str) -> Path | None:
        """Snapshot a collection file under a timestamped name.

        Returns:
            Path of the copy, or None when the source file is absent.
        """
        path = self.path_of(collection)
        if not path.is_file():
            return None
        copy_path = self._root / (
            f"{path.stem}{COPY_NAME_SEPARATOR}{_next_copy_stamp()}{COLLECTION_FILE_EXTENSION}"
        )
        try:
            with path.open("rb") as source, copy_path.open("xb") as target:
                shutil.copyfileobj(source, target)
        except FileExistsError as error:
            raise CrumbIOError(
                f"Failed to copy {path}: copy target {copy_path} already exists. "
                "Retry the copy to get a fresh timestamp."
            ) from error
        except OSError as error:
            raise _file_error("copy", path, error) from error
        _LOGGER.info("collection_copied", path=str(path), copy_path=str(copy_path))
        return copy_path

    def _collection_files(self) -> list[Path]:
        return [path for path in self._root.glob(COLLECTION_FILE_GLOB) if path.is_file()]


def open_database(root: Path | str | None = None, config: CrumbConfig | None = None) -> Database:
    """Open a database folder, creating it when absent.

    Args:
        root: Optional folder; defaults to the configured data root.
        config: Optional runtime configuration.

    Returns:
        Database bound to the folder.

    Raises:
        CrumbIOError: If the folder cannot be created.
    """
    config = config or CrumbConfig.from_env()
    configure_logging(config.log_level)
    folder = Path(root).expanduser() if root is not None else config.data_root
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise _file_error("create", folder, error) from error
    _LOGGER.debug("database_opened", root=str(folder))
    return Database(folder)


class _CopyStampClock:
    """UTC tick counter that never repeats within a process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> int:
        delta = datetime.now(timezone.utc) - _EPOCH
        ticks = (
            (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
        ) * _TICKS_PER_MICROSECOND
        with self._lock:
            self._last = max(ticks, self._last + 1)
            return self._last


_COPY_CLOCK = _CopyStampClock()


def _next_copy_stamp() -> int:
    return _COPY_CLOCK.next()


def _validate_name(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise CrumbStoreError(
            f"Invalid collection name {name!r}: expected a plain file name without separators."
        )
    return name


async def _truncate(path: Path) -> None:
    try:
        await asyncio.to_thread(path.write_bytes, b"")
    except OSError as error:
        raise _file_error("purge", path, error) from error


def _file_error(action: str, path: Path, error: OSError) -> CrumbIOError:
    return CrumbIOError(
        f"Failed to {action} {path}: {error.strerror or error}. "
        "Check folder permissions and free disk space."
    )
