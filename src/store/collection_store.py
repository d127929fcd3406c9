"""In-memory record collections bound to JSON files.

This module loads a collection file wholesale, exposes in-memory
mutation primitives, and writes the whole sequence back on demand.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Generic
from uuid import UUID

from core.constants import SMALLEST_BUFFER_SIZE
from core.errors import CrumbIOError, CrumbStoreError
from core.logging_config import get_logger
from core.types import R, record_key, same_identity
from store.buffer_policy import select_buffer_size
from store.record_codec import decode_records, encode_records, ensure_record_type

_LOGGER = get_logger(__name__)


class Collection(Generic[R]):
    """Ordered in-memory records of one type bound to one file.

    Mutations never touch disk. Call ``write`` to persist. Instances
    are not synchronized; concurrent writers to one path are
    last-writer-wins.
    """

    def __init__(self, path: Path, record_type: type[R], records: list[R] | None = None) -> None:
        """Create a collection around already-loaded records.

        Args:
            path: Backing JSON file path.
            record_type: Record dataclass stored in this collection.
            records: Initial records in order.
        """
        ensure_record_type(record_type)
        self._path = Path(path)
        self._record_type = record_type
        self._records: list[R] = [self._checked(record) for record in records or ()]

    @classmethod
    async def load(cls, path: Path, record_type: type[R]) -> "Collection[R]":
        """Load a collection from its file.

        An absent or zero-length file yields an empty collection.

        Args:
            path: Backing JSON file path.
            record_type: Record dataclass to decode.

        Returns:
            Collection holding the decoded records.

        Raises:
            CrumbIOError: If the file cannot be read.
            CrumbDeserializationError: If the content is malformed.
        """
        ensure_record_type(record_type)
        path = Path(path)
        try:
            file_size = path.stat().st_size
        except FileNotFoundError:
            return cls(path, record_type)
        except OSError as error:
            raise _io_error("read", path, error) from error
        buffer_size = select_buffer_size(file_size)
        if file_size == 0:
            records: list[R] = []
        else:
            content = await _read_file(path, buffer_size)
            records = decode_records(record_type, content) if content else []
        _LOGGER.debug(
            "collection_loaded",
            path=str(path),
            record_type=record_type.__name__,
            record_count=len(records),
            buffer_size=buffer_size,
        )
        return cls(path, record_type, records)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def record_type(self) -> type[R]:
        return self._record_type

    @property
    def values(self) -> tuple[R, ...]:
        """Snapshot of the current records in order."""
        return tuple(self._records)

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[R]:
        return iter(list(self._records))

    def __repr__(self) -> str:
        return (
            f"Collection(path={str(self._path)!r}, "
            f"record_type={self._record_type.__name__}, count={len(self._records)})"
        )

    def find_by_id(self, record_id: UUID) -> R | None:
        """Return the first record with the given id, if any."""
        index = self._index_of(record_id)
        return None if index is None else self._records[index]

    def append(self, record: R) -> None:
        self._records.append(self._checked(record))

    def extend(self, records: Iterable[R]) -> None:
        """Append records after existing content, keeping their order."""
        self._records.extend([self._checked(record) for record in records])

    def replace_all(self, records: Iterable[R]) -> None:
        """Overwrite the in-memory records with a new sequence."""
        self._records = [self._checked(record) for record in records]

    def retain(self, predicate: Callable[[R], bool]) -> None:
        """Keep only records matching the predicate, preserving order."""
        self._records = [record for record in self._records if predicate(record)]

    def remove_where(self, predicate: Callable[[R], bool]) -> int:
        """Remove records matching the predicate.

        Args:
            predicate: Selector for records to drop.

        Returns:
            Number of removed records.
        """
        before = len(self._records)
        self._records = [record for record in self._records if not predicate(record)]
        return before - len(self._records)

    def update_by_id(self, record_id: UUID, replacement: R) -> bool:
        """Replace the first record with ``record_id`` in place.

        Args:
            record_id: Identifier to look up.
            replacement: Record stored at the same position.

        Returns:
            True if a record was replaced, False if none matched.
        """
        self._checked(replacement)
        index = self._index_of(record_id)
        if index is None:
            return False
        self._records[index] = replacement
        return True

    def remove_by_id(self, record_id: UUID) -> bool:
        """Remove the first record with ``record_id``."""
        index = self._index_of(record_id)
        if index is None:
            return False
        del self._records[index]
        return True

    def remove(self, record: R) -> bool:
        """Remove the first record sharing identity with ``record``."""
        for index, candidate in enumerate(self._records):
            if same_identity(candidate, record):
                del self._records[index]
                return True
        return False

    def clear(self) -> None:
        """Empty the in-memory records without touching disk."""
        self._records.clear()

    def for_each(self, action: Callable[[R], object]) -> None:
        for record in list(self._records):
            action(record)

    def to_dict(self) -> dict[UUID, R]:
        """Map ids to records; later duplicates win."""
        return {record_key(record): record for record in self._records}

    async def write(self) -> None:
        """Overwrite the backing file with the in-memory records.

        Raises:
            CrumbSerializationError: If a record cannot be encoded.
            CrumbIOError: If the file cannot be written.
        """
        content = encode_records(self._records)
        try:
            file_size = self._path.stat().st_size
        except FileNotFoundError:
            buffer_size = SMALLEST_BUFFER_SIZE
        except OSError as error:
            raise _io_error("write", self._path, error) from error
        else:
            buffer_size = select_buffer_size(file_size)
        await _write_file(self._path, content, buffer_size)
        _LOGGER.debug(
            "collection_written",
            path=str(self._path),
            record_type=self._record_type.__name__,
            record_count=len(self._records),
            byte_count=len(content),
            buffer_size=buffer_size,
        )

    async def clear_and_write(self) -> None:
        """Clear the records and persist the empty collection."""
        self.clear()
        await self.write()

    def _checked(self, record: R) -> R:
        if not isinstance(record, self._record_type):
            raise CrumbStoreError(
                f"Cannot store {type(record).__name__} in the {self._record_type.__name__} "
                f"collection at {self._path}. Open the collection for {type(record).__name__} "
                "with Database.get_collection instead."
            )
        return record

    def _index_of(self, record_id: UUID) -> int | None:
        for index, record in enumerate(self._records):
            if record_key(record) == record_id:
                return index
        return None


async def _read_file(path: Path, buffer_size: int) -> bytes:
    """Read a whole file in buffer-sized chunks until EOF."""
    chunks: list[bytes] = []
    try:
        with path.open("rb", buffering=buffer_size) as handle:
            while True:
                chunk = await asyncio.to_thread(handle.read, buffer_size)
                if not chunk:
                    break
                chunks.append(chunk)
    except OSError as error:
        raise _io_error("read", path, error) from error
    return b"".join(chunks)


async def _write_file(path: Path, content: bytes, buffer_size: int) -> None:
    """Truncate a file and write content in buffer-sized chunks."""
    view = memoryview(content)
    try:
        with path.open("wb", buffering=buffer_size) as handle:
            offset = 0
            while offset < len(view):
                written = await asyncio.to_thread(
                    handle.write, view[offset : offset + buffer_size]
                )
                offset += written
            await asyncio.to_thread(handle.flush)
    except OSError as error:
        raise _io_error("write", path, error) from error


def _io_error(action: str, path: Path, error: OSError) -> CrumbIOError:
    return CrumbIOError(
        f"Failed to {action} collection file at {path}: {error.strerror or error}. "
        "Check that the path exists and is accessible."
    )
