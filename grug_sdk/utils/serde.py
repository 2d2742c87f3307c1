"""
Deterministic JSON (de)serialization for the grug wire protocol.

The chain encodes transactions, query requests/responses and contract
payloads as compact UTF-8 JSON. Field order is significant for anything that
ends up inside a hash pre-image (sign bytes), so we never sort keys: mappings
are emitted in insertion order, and the SDK's wire dataclasses build their
dicts in the schema's field order.

API
---
- serialize(obj) -> bytes
- deserialize(data: bytes|bytearray|memoryview|str) -> object
- to_json_value(obj) -> JSON-compatible Python value
- SerdeError

Supported input types
---------------------
- None, bool, int, float, str
- list / tuple (emitted as arrays)
- dict with str keys
- any object with a ``to_wire()`` method returning one of the above
  (Message, QueryRequest, Coin, Tx, ...)

Raw ``bytes`` are rejected on purpose: whether a byte field travels as hex or
base64 is part of the message schema, so callers must encode explicitly.
"""

from __future__ import annotations

import json
from typing import Any, Union

from .bytes import BytesLike

__all__ = ["SerdeError", "serialize", "deserialize", "to_json_value"]


class SerdeError(ValueError):
    pass


def to_json_value(obj: Any) -> Any:
    """Convert *obj* (possibly holding wire dataclasses) into plain JSON values."""
    to_wire = getattr(obj, "to_wire", None)
    if callable(to_wire):
        return to_json_value(to_wire())
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if not isinstance(k, str):
                raise SerdeError(f"map keys must be strings, got {type(k).__name__}")
            out[k] = to_json_value(v)
        return out
    if isinstance(obj, (list, tuple)):
        return [to_json_value(v) for v in obj]
    if isinstance(obj, (bytes, bytearray, memoryview)):
        raise SerdeError("raw bytes must be hex/base64 encoded by the message schema")
    raise SerdeError(f"cannot serialize value of type {type(obj).__name__}")


def serialize(obj: Any) -> bytes:
    """Encode *obj* to compact, order-preserving JSON bytes."""
    value = to_json_value(obj)
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise SerdeError(str(e)) from e
    return text.encode("utf-8")


def deserialize(data: Union[BytesLike, str]) -> Any:
    """Decode JSON *data* into Python objects."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerdeError(f"payload is not valid UTF-8: {e}") from e
    elif isinstance(data, str):
        text = data
    else:
        raise TypeError(f"deserialize expects bytes or str, got {type(data)!r}")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SerdeError(f"invalid JSON payload: {e}") from e
