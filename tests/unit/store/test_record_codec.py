"""Unit tests for collection record encoding."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from uuid import uuid4

import pytest

from core.errors import CrumbDeserializationError, CrumbSerializationError, CrumbStoreError
from core.types import Record
from store.record_codec import decode_records, encode_records, ensure_record_type
from tests.sample_records import Account, Address, Ledger, Person, Tier


def test_encode_is_compact_and_omits_none() -> None:
    """Encoding should skip null fields and extraneous whitespace."""
    person = Person(name="Ann", age=3)

    content = encode_records([person]).decode("utf-8")

    assert content == f'[{{"id":"{person.id}","name":"Ann","age":3}}]'


def test_encode_empty_sequence() -> None:
    assert encode_records([]) == b"[]"


def test_encode_keeps_unicode_text() -> None:
    content = encode_records([Person(name="日本語")])

    assert "日本語" in content.decode("utf-8")


def test_encode_converts_rich_fields() -> None:
    """Enums, datetimes and nested dataclasses should become JSON values."""
    opened_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    account = Account(
        owner="ann",
        tier=Tier.PAID,
        opened_at=opened_at,
        tags=["a"],
        address=Address(city="Oslo"),
    )

    payload = json.loads(encode_records([account]))[0]

    assert payload["tier"] == "paid"
    assert payload["opened_at"] == opened_at.isoformat()
    assert payload["address"] == {"city": "Oslo"}


def test_encode_rejects_unsupported_values() -> None:
    account = Account(owner="ann", tags=[object()])  # type: ignore[list-item]

    with pytest.raises(CrumbSerializationError, match="tags"):
        encode_records([account])


def test_decode_rebuilds_typed_records() -> None:
    """Decoding should coerce ids, enums, datetimes and nested types."""
    account = Account(
        owner="ann",
        tier=Tier.PAID,
        opened_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        tags=["x", "y"],
        address=Address(city="Oslo", zip_code="0150"),
        balance=2.5,
    )

    (decoded,) = decode_records(Account, encode_records([account]))

    assert decoded.id == account.id
    assert decoded.tier is Tier.PAID
    assert decoded.opened_at == account.opened_at
    assert decoded.address == Address(city="Oslo", zip_code="0150")
    assert decoded.tags == ["x", "y"] and decoded.balance == 2.5


def test_decode_treats_absent_fields_as_defaults() -> None:
    record_id = uuid4()
    content = json.dumps([{"id": str(record_id), "name": "Bo"}]).encode("utf-8")

    (decoded,) = decode_records(Person, content)

    assert decoded.id == record_id
    assert decoded.nickname is None and decoded.age == 0


def test_decode_accepts_integer_for_float_field() -> None:
    content = json.dumps([{"id": str(uuid4()), "owner": "a", "balance": 3}]).encode("utf-8")

    (decoded,) = decode_records(Account, content)

    assert decoded.balance == 3.0


@pytest.mark.parametrize(
    "content",
    [
        b"{not json",
        b'{"id": "x"}',
        b"[1, 2]",
        b'[{"id": "not-a-uuid"}]',
        b'[{"id": "6f1c1a2e-8f55-4a57-9a43-2c3d4e5f6a7b", "age": "old"}]',
        b'[{"id": "6f1c1a2e-8f55-4a57-9a43-2c3d4e5f6a7b", "age": true}]',
        b"\xff\xfe",
    ],
)
def test_decode_rejects_malformed_content(content: bytes) -> None:
    """Malformed or mismatched content should fail as deserialization errors."""
    with pytest.raises(CrumbDeserializationError):
        decode_records(Person, content)


def test_decode_reports_missing_required_field() -> None:
    content = json.dumps([{"id": str(uuid4())}]).encode("utf-8")

    with pytest.raises(CrumbDeserializationError, match="owner"):
        decode_records(Account, content)


def test_ensure_record_type_rejects_non_dataclass() -> None:
    with pytest.raises(CrumbStoreError):
        ensure_record_type(dict)


def test_ensure_record_type_rejects_dataclass_without_id() -> None:
    @dataclass
    class Anonymous:
        name: str = ""

    with pytest.raises(CrumbStoreError, match="id"):
        ensure_record_type(Anonymous)


def test_typed_mapping_keys_roundtrip() -> None:
    """Mapping keys should come back with their declared types."""
    account_id = uuid4()
    ledger = Ledger(
        balances={account_id: 5},
        counts={1: "a", 20: "b"},
        rates={Tier.PAID: 0.5},
    )

    payload = json.loads(encode_records([ledger]))[0]
    (decoded,) = decode_records(Ledger, encode_records([ledger]))

    assert payload["rates"] == {"paid": 0.5}
    assert decoded.balances == {account_id: 5}
    assert decoded.counts == {1: "a", 20: "b"}
    assert decoded.rates == {Tier.PAID: 0.5}


def test_decode_rejects_mistyped_mapping_key() -> None:
    content = json.dumps([{"id": str(uuid4()), "counts": {"one": "a"}}]).encode("utf-8")

    with pytest.raises(CrumbDeserializationError, match="counts"):
        decode_records(Ledger, content)


def test_ensure_record_type_rejects_unresolvable_annotations() -> None:
    """Field types that cannot be resolved should fail as store errors."""

    @dataclass(frozen=True)
    class LocalNote:
        text: str = ""

    @dataclass(eq=False)
    class Annotated(Record):
        note: LocalNote | None = None

    with pytest.raises(CrumbStoreError, match="cannot resolve"):
        ensure_record_type(Annotated)
