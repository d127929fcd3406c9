"""Shared record identity models.

This module defines the record base class and identity helpers used
by the collection store to address records independent of payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable
from uuid import UUID, uuid4

from core.constants import RECORD_ID_FIELD


@runtime_checkable
class Identified(Protocol):
    """Any object exposing a stable unique identifier."""

    @property
    def id(self) -> UUID: ...


R = TypeVar("R", bound=Identified)


@dataclass(eq=False, kw_only=True)
class Record:
    """Base stored entity with an immutable UUID identifier.

    Equality and hashing consider only ``id``. Subclasses should be
    declared with ``@dataclass(eq=False)`` to keep that behavior.

    Attributes:
        id: Identifier generated at construction time.
    """

    id: UUID = field(default_factory=uuid4)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == RECORD_ID_FIELD and RECORD_ID_FIELD in self.__dict__:
            raise AttributeError(
                f"Cannot reassign id of {type(self).__name__}: record ids are immutable."
            )
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def record_key(record: Identified) -> UUID:
    """Return the identity key of a record."""
    return record.id


def same_identity(left: Identified, right: Identified) -> bool:
    """Return whether two records share an identifier.

    Args:
        left: First record.
        right: Second record.

    Returns:
        True when both ids are equal, regardless of other fields.
    """
    return record_key(left) == record_key(right)
