"""Decode the status JSON payload into the frozen status model.

Decoding policy:

* fields present on the wire but not modelled are ignored;
* modelled fields that are absent or ``null`` take their zero value;
* integer fields stay Python ints, float fields accept JSON integers,
  strings are never coerced from numbers;
* ``messages`` style values are kept as frozen opaque JSON.

A JSON type that contradicts the declared kind fails the whole decode.
"""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any

from fdbstat.errors import DecodeFailure
from fdbstat.models.enums import Kind
from fdbstat.models.status import StatusSnapshot

logger = logging.getLogger("fdbstat.decoder")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True, slots=True)
class FieldAlias:
    """One row of a record's alias table."""

    attr: str
    wire: str
    kind: Kind
    item: Any = None


class _SchemaMismatch(TypeError):
    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


@functools.lru_cache(maxsize=None)
def alias_table(cls: type) -> tuple[FieldAlias, ...]:
    """Return the wire alias table for a model record class.

    Fields without decode metadata (``StatusSnapshot.read_version``) are not
    part of the wire format and are left out.
    """
    table = []
    for f in fields(cls):
        kind = f.metadata.get("kind")
        if kind is None:
            continue
        table.append(
            FieldAlias(
                attr=f.name,
                wire=f.metadata.get("wire") or f.name,
                kind=kind,
                item=f.metadata.get("item"),
            )
        )
    return tuple(table)


def _item_kind(item: Any) -> tuple[Kind, Any]:
    """Resolve a list/map item descriptor to (kind, record class or None)."""
    if isinstance(item, Kind):
        return item, None
    return Kind.RECORD, item


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _zero(kind: Kind, item: Any) -> Any:
    if kind == Kind.INT:
        return 0
    if kind == Kind.FLOAT:
        return 0.0
    if kind == Kind.STR:
        return ""
    if kind == Kind.BOOL:
        return False
    if kind == Kind.RECORD:
        return item()
    if kind == Kind.LIST:
        return ()
    if kind == Kind.MAP:
        return MappingProxyType({})
    return None


def freeze(value: Any) -> Any:
    """Recursively convert a JSON value into an immutable equivalent."""
    if isinstance(value, dict):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: back to plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def _decode_value(kind: Kind, item: Any, value: Any, path: str) -> Any:
    if value is None:
        return _zero(kind, item)

    if kind == Kind.INT:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or isinstance(value, bool):
            raise _SchemaMismatch(f"expected integer, got {_json_type(value)}", path)
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise _SchemaMismatch("integer out of int64 range", path)
        return value

    if kind == Kind.FLOAT:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _SchemaMismatch(f"expected number, got {_json_type(value)}", path)

    if kind == Kind.STR:
        if isinstance(value, str):
            return value
        raise _SchemaMismatch(f"expected string, got {_json_type(value)}", path)

    if kind == Kind.BOOL:
        if isinstance(value, bool):
            return value
        raise _SchemaMismatch(f"expected boolean, got {_json_type(value)}", path)

    if kind == Kind.RECORD:
        if not isinstance(value, dict):
            raise _SchemaMismatch(f"expected object, got {_json_type(value)}", path)
        return item(**_decode_fields(item, value, path))

    if kind == Kind.LIST:
        if not isinstance(value, list):
            raise _SchemaMismatch(f"expected array, got {_json_type(value)}", path)
        sub_kind, sub_item = _item_kind(item)
        return tuple(
            _decode_value(sub_kind, sub_item, v, f"{path}[{i}]")
            for i, v in enumerate(value)
        )

    if kind == Kind.MAP:
        if not isinstance(value, dict):
            raise _SchemaMismatch(f"expected object, got {_json_type(value)}", path)
        sub_kind, sub_item = _item_kind(item)
        return MappingProxyType(
            {
                k: _decode_value(sub_kind, sub_item, v, f"{path}[{k}]")
                for k, v in value.items()
            }
        )

    return freeze(value)


def _decode_fields(cls: type, data: dict, path: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for alias in alias_table(cls):
        if alias.wire not in data:
            continue
        sub_path = f"{path}.{alias.wire}" if path else alias.wire
        kwargs[alias.attr] = _decode_value(
            alias.kind, alias.item, data[alias.wire], sub_path
        )
    return kwargs


def parse_document(raw: bytes | str) -> dict:
    """Parse the raw payload and check that the top level is an object."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeFailure("status payload is not valid UTF-8") from exc

    try:
        doc = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise DecodeFailure("malformed status JSON") from exc

    if not isinstance(doc, dict):
        raise DecodeFailure(
            f"expected a JSON object at top level, got {_json_type(doc)}"
        )
    return doc


def decode(raw: bytes | str, read_version: int) -> StatusSnapshot:
    """Decode a status payload captured at *read_version*."""
    doc = parse_document(raw)
    try:
        kwargs = _decode_fields(StatusSnapshot, doc, "")
    except _SchemaMismatch as exc:
        raise DecodeFailure(str(exc), exc.path) from exc
    except RecursionError as exc:
        raise DecodeFailure("status document nested too deeply") from exc

    snap = StatusSnapshot(read_version=read_version, **kwargs)
    logger.debug(
        "Decoded status at version %d: %d processes, %d machines",
        read_version,
        len(snap.cluster.processes),
        len(snap.cluster.machines),
    )
    return snap


def _encode_value(kind: Kind, item: Any, value: Any) -> Any:
    if kind == Kind.RECORD:
        return _encode_record(value)
    if kind == Kind.LIST:
        sub_kind, sub_item = _item_kind(item)
        return [_encode_value(sub_kind, sub_item, v) for v in value]
    if kind == Kind.MAP:
        sub_kind, sub_item = _item_kind(item)
        return {k: _encode_value(sub_kind, sub_item, v) for k, v in value.items()}
    if kind == Kind.OPAQUE:
        return thaw(value)
    return value


def _encode_record(obj: Any) -> dict[str, Any]:
    return {
        alias.wire: _encode_value(alias.kind, alias.item, getattr(obj, alias.attr))
        for alias in alias_table(type(obj))
    }


def encode(snapshot: StatusSnapshot, include_read_version: bool = False) -> dict:
    """Re-serialize the modelled subset of *snapshot* to its wire shape."""
    doc = _encode_record(snapshot)
    if include_read_version:
        return {"read_version": snapshot.read_version, **doc}
    return doc
