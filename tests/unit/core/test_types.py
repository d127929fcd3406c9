"""Unit tests for record identity semantics."""

from __future__ import annotations

from dataclasses import dataclass, replace
from uuid import UUID

import pytest

from core.types import Identified, Record, record_key, same_identity
from tests.sample_records import Person


def test_record_generates_unique_uuid() -> None:
    """Each record should get its own UUID at construction."""
    first, second = Person(name="a"), Person(name="a")

    assert isinstance(first.id, UUID) and first.id != second.id


def test_equality_uses_identifier_only() -> None:
    """Records with equal ids are equal even when fields differ."""
    original = Person(name="a", age=1)
    renamed = replace(original, name="b", age=2)

    assert original == renamed
    assert hash(original) == hash(renamed)
    assert original != Person(name="a", age=1)


def test_id_cannot_be_reassigned() -> None:
    """Record ids are immutable once assigned."""
    person = Person(name="a")

    with pytest.raises(AttributeError, match="immutable"):
        person.id = Person().id


def test_other_fields_remain_mutable() -> None:
    person = Person(name="a")

    person.name = "b"

    assert person.name == "b"


def test_same_identity_ignores_structural_equality() -> None:
    """Identity helper should not depend on a subclass's __eq__."""

    @dataclass
    class Structural(Record):
        label: str = ""

    first = Structural(label="x")
    clone = Structural(id=first.id, label="y")

    assert same_identity(first, clone)
    assert record_key(first) == first.id
    assert isinstance(first, Identified)
