"""Shared JSON serialization for collection records.

This module converts record dataclasses to compact JSON arrays and
rebuilds typed records from decoded payloads using field type hints.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import dataclasses
from datetime import date, datetime
from enum import Enum
import json
import types
from typing import Any, Union, get_args, get_origin, get_type_hints
from uuid import UUID

from core.constants import RECORD_ID_FIELD
from core.errors import CrumbDeserializationError, CrumbSerializationError, CrumbStoreError

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


def ensure_record_type(record_type: type) -> None:
    """Validate that a type can be stored in a collection.

    Args:
        record_type: Candidate record class.

    Raises:
        CrumbStoreError: If type is not a dataclass with an id field.
    """
    if not isinstance(record_type, type) or not dataclasses.is_dataclass(record_type):
        raise CrumbStoreError(
            f"Unsupported record type {record_type!r}: expected a dataclass type. "
            "Derive record classes from core.types.Record."
        )
    field_names = {item.name for item in dataclasses.fields(record_type)}
    if RECORD_ID_FIELD not in field_names:
        raise CrumbStoreError(
            f"Unsupported record type {record_type.__name__}: missing '{RECORD_ID_FIELD}' field. "
            "Derive record classes from core.types.Record."
        )
    record_type_hints(record_type)


def record_type_hints(record_type: type) -> dict[str, Any]:
    """Resolve the field annotations of a record dataclass.

    Args:
        record_type: Record or nested dataclass.

    Returns:
        Field name to resolved annotation.

    Raises:
        CrumbStoreError: If an annotation cannot be resolved.
    """
    try:
        return get_type_hints(record_type)
    except (NameError, TypeError) as error:
        raise CrumbStoreError(
            f"Unsupported record type {record_type.__name__}: cannot resolve field types: {error}. "
            "Define record classes and the types they reference at module level."
        ) from error


def record_to_payload(record: Any) -> dict[str, Any]:
    """Serialize one record into a JSON-safe payload.

    Fields set to None are omitted.

    Args:
        record: Record dataclass instance.

    Returns:
        Dictionary payload for JSON encoding.

    Raises:
        CrumbSerializationError: If a field value cannot be encoded.
    """
    return _dataclass_to_payload(record)


def encode_records(records: Iterable[Any]) -> bytes:
    """Encode records into a compact UTF-8 JSON array.

    Args:
        records: Records in collection order.

    Returns:
        Encoded file content.

    Raises:
        CrumbSerializationError: If any record cannot be encoded.
    """
    payloads = [record_to_payload(record) for record in records]
    text = json.dumps(payloads, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


def decode_records(record_type: type, data: bytes) -> list[Any]:
    """Decode a JSON array into typed records.

    Args:
        record_type: Record dataclass to build.
        data: Raw file content.

    Returns:
        Records in file order.

    Raises:
        CrumbDeserializationError: If content is malformed or mismatched.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as error:
        raise CrumbDeserializationError(
            f"Failed to decode {record_type.__name__} collection: content is not UTF-8. "
            "Purge or restore the collection file."
        ) from error
    except json.JSONDecodeError as error:
        raise CrumbDeserializationError(
            f"Failed to parse {record_type.__name__} collection at line {error.lineno}: "
            f"{error.msg}. Purge or restore the collection file."
        ) from error
    if not isinstance(payload, list):
        raise CrumbDeserializationError(
            f"Failed to parse {record_type.__name__} collection: "
            "expected JSON array at top level. Purge or restore the collection file."
        )
    hints = record_type_hints(record_type)
    records = []
    for index, item in enumerate(payload):
        try:
            records.append(_build_dataclass(record_type, item, hints))
        except (TypeError, ValueError, KeyError) as error:
            raise CrumbDeserializationError(
                f"Invalid {record_type.__name__} record at index {index}: {error}. "
                "Purge or restore the collection file."
            ) from error
    return records


def _dataclass_to_payload(instance: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for item in dataclasses.fields(instance):
        value = getattr(instance, item.name)
        if value is None:
            continue
        payload[item.name] = _to_json_value(value, item.name)
    return payload


def _to_json_value(value: Any, path: str) -> Any:
    """Convert a field value into a JSON-compatible value."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Enum):
        return _to_json_value(value.value, path)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _dataclass_to_payload(value)
    if isinstance(value, Mapping):
        return {
            _to_json_key(key, path): _to_json_value(item, f"{path}.{key}")
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    raise CrumbSerializationError(
        f"Cannot encode field '{path}' of type {type(value).__name__}. "
        "Use JSON primitives, UUID, datetime, Enum, dataclasses, or containers of those."
    )


def _to_json_key(key: Any, path: str) -> str:
    """Convert a mapping key into its JSON object key."""
    if isinstance(key, Enum):
        return _to_json_key(key.value, path)
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (str, int, float, UUID)):
        return str(key)
    if isinstance(key, (datetime, date)):
        return key.isoformat()
    raise CrumbSerializationError(
        f"Cannot encode key {key!r} of field '{path}' with type {type(key).__name__}. "
        "Use strings, numbers, booleans, UUID, datetime, or Enum mapping keys."
    )


def _build_dataclass(target: type, payload: Any, hints: dict[str, Any]) -> Any:
    if not isinstance(payload, dict):
        raise TypeError(f"expected object for {target.__name__}, got {type(payload).__name__}")
    kwargs: dict[str, Any] = {}
    for item in dataclasses.fields(target):
        if not item.init or item.name not in payload:
            continue
        kwargs[item.name] = _coerce(payload[item.name], hints.get(item.name, Any), item.name)
    missing = [
        item.name
        for item in dataclasses.fields(target)
        if item.init
        and item.name not in kwargs
        and item.default is dataclasses.MISSING
        and item.default_factory is dataclasses.MISSING
    ]
    if missing:
        raise KeyError(f"missing required field(s) {', '.join(missing)}")
    return target(**kwargs)


def _coerce(value: Any, annotation: Any, path: str) -> Any:
    """Coerce a decoded JSON value onto a type annotation."""
    if annotation is Any:
        return value
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return _coerce_union(value, get_args(annotation), path)
    if value is None:
        if annotation is type(None):
            return None
        raise TypeError(f"field '{path}' is null")
    if origin in _SEQUENCE_ORIGINS:
        return _coerce_sequence(value, origin, get_args(annotation), path)
    if origin in (dict, Mapping):
        return _coerce_mapping(value, get_args(annotation), path)
    if origin is not None:
        return value
    return _coerce_scalar(value, annotation, path)


def _coerce_union(value: Any, options: tuple[Any, ...], path: str) -> Any:
    if value is None:
        if type(None) in options:
            return None
        raise TypeError(f"field '{path}' is null")
    errors = []
    for option in options:
        if option is type(None):
            continue
        try:
            return _coerce(value, option, path)
        except (TypeError, ValueError, KeyError) as error:
            errors.append(str(error))
    raise TypeError("; ".join(errors) or f"field '{path}' matches no union member")


def _coerce_sequence(value: Any, origin: type, args: tuple[Any, ...], path: str) -> Any:
    if not isinstance(value, list):
        raise TypeError(f"field '{path}' expected array, got {type(value).__name__}")
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        args = (args[0],)
    if origin is tuple and len(args) > 1:
        if len(args) != len(value):
            raise ValueError(f"field '{path}' expected {len(args)} items, got {len(value)}")
        return tuple(
            _coerce(item, item_type, f"{path}[{index}]")
            for index, (item, item_type) in enumerate(zip(value, args))
        )
    item_type = args[0] if args else Any
    items = [_coerce(item, item_type, f"{path}[{index}]") for index, item in enumerate(value)]
    return origin(items)


def _coerce_mapping(value: Any, args: tuple[Any, ...], path: str) -> dict[Any, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"field '{path}' expected object, got {type(value).__name__}")
    value_type = args[1] if len(args) == 2 else Any
    key_type = args[0] if len(args) == 2 else Any
    return {
        _coerce_key(key, key_type, path): _coerce(item, value_type, f"{path}.{key}")
        for key, item in value.items()
    }


def _coerce_key(key: str, annotation: Any, path: str) -> Any:
    """Parse a JSON object key back into a typed mapping key."""
    if annotation is Any:
        return key
    if get_origin(annotation) is Union or get_origin(annotation) is types.UnionType:
        errors = []
        for option in get_args(annotation):
            if option is type(None):
                continue
            try:
                return _coerce_key(key, option, path)
            except (TypeError, ValueError) as error:
                errors.append(str(error))
        raise ValueError(
            "; ".join(errors) or f"key {key!r} of field '{path}' matches no union member"
        )
    if annotation is bool:
        if key not in ("true", "false"):
            raise ValueError(f"key {key!r} of field '{path}' expected boolean")
        return key == "true"
    if annotation in (int, float):
        try:
            return annotation(key)
        except ValueError as error:
            raise ValueError(
                f"key {key!r} of field '{path}' expected {annotation.__name__}"
            ) from error
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        for member in annotation:
            if _to_json_key(member.value, path) == key:
                return member
        raise ValueError(f"key {key!r} of field '{path}' is not a valid {annotation.__name__}")
    return _coerce(key, annotation, f"{path}.{key}")


def _coerce_scalar(value: Any, annotation: Any, path: str) -> Any:
    if not isinstance(annotation, type):
        return value
    if annotation is bool:
        if not isinstance(value, bool):
            raise TypeError(f"field '{path}' expected boolean, got {type(value).__name__}")
        return value
    if annotation is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"field '{path}' expected integer, got {type(value).__name__}")
        return value
    if annotation is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"field '{path}' expected number, got {type(value).__name__}")
        return float(value)
    if annotation is str:
        if not isinstance(value, str):
            raise TypeError(f"field '{path}' expected string, got {type(value).__name__}")
        return value
    if issubclass(annotation, Enum):
        return annotation(value)
    if annotation is UUID:
        return UUID(_require_string(value, path))
    if annotation is datetime:
        return datetime.fromisoformat(_require_string(value, path))
    if annotation is date:
        return date.fromisoformat(_require_string(value, path))
    if dataclasses.is_dataclass(annotation):
        return _build_dataclass(annotation, value, record_type_hints(annotation))
    return value


def _require_string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"field '{path}' expected string, got {type(value).__name__}")
    return value
