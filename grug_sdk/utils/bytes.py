from __future__ import annotations

import base64
import binascii
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_U32_MAX = 0xFFFF_FFFF


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as hex; optional '0x' prefix; even-length enforced

    Raises:
      ValueError on invalid hex strings.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return from_hex(data)
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """
    Bytes -> hex string (lowercase). Prefix with '0x' by default.
    """
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes.

    Enforces even-length (nibbles must pair to bytes) and lowercase/uppercase agnostic.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise ValueError("hex string must have even length")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


# Wire helpers: the message schema fixes which fields travel as hex (no
# prefix) and which as standard base64.


def encode_hex(b: BytesLike) -> str:
    return to_hex(b, prefix=False)


def decode_hex(s: str) -> bytes:
    return from_hex(s)


def encode_base64(b: BytesLike) -> str:
    return base64.b64encode(bytes(b)).decode("ascii")


def decode_base64(s: str) -> bytes:
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 string: {e}") from e


def encode_utf8(s: str) -> bytes:
    return s.encode("utf-8")


def decode_utf8(b: BytesLike) -> str:
    return bytes(b).decode("utf-8")


def encode_big_endian32(n: int) -> bytes:
    """
    Fixed 4-byte big-endian encoding of an unsigned 32-bit integer.

    Used inside hash pre-images (sign bytes, salts). Anything outside
    [0, 2**32) is a caller bug and raises immediately.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"encode_big_endian32 expects an int, got {type(n)!r}")
    if n < 0 or n > _U32_MAX:
        raise ValueError(f"value {n} does not fit in 32 bits")
    return n.to_bytes(4, "big")


def decode_big_endian32(b: BytesLike) -> int:
    raw = bytes(b)
    if len(raw) != 4:
        raise ValueError(f"expected 4 bytes, got {len(raw)}")
    return int.from_bytes(raw, "big")


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "to_hex",
    "from_hex",
    "encode_hex",
    "decode_hex",
    "encode_base64",
    "decode_base64",
    "encode_utf8",
    "decode_utf8",
    "encode_big_endian32",
    "decode_big_endian32",
]
