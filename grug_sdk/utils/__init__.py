"""
Utility helpers for the Python SDK.

Re-exports:
- bytes: hex / base64 helpers and fixed-width big-endian integers
- hash: SHA-256 convenience wrappers
- serde: deterministic JSON (de)serialization for the wire protocol
"""

from .bytes import (decode_base64, decode_hex, encode_base64,
                    encode_big_endian32, encode_hex, ensure_bytes, from_hex,
                    to_hex)
from .hash import sha256, sha256_hex
from .serde import deserialize, serialize

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "encode_hex",
    "decode_hex",
    "encode_base64",
    "decode_base64",
    "encode_big_endian32",
    # hash
    "sha256",
    "sha256_hex",
    # serde
    "serialize",
    "deserialize",
]
