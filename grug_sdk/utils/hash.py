from __future__ import annotations

import hashlib

from .bytes import BytesLike, ensure_bytes, to_hex

# Every digest on the chain side (code hashes, addresses, sign bytes, JMT
# nodes) is SHA-256 with a 32-byte output.

HASH_LENGTH = 32
ZERO_HASH = b"\x00" * HASH_LENGTH


def sha256(data: BytesLike) -> bytes:
    """Return SHA-256 digest of *data* (bytes)."""
    return hashlib.sha256(ensure_bytes(data)).digest()


def sha256_hex(data: BytesLike, *, prefix: bool = True) -> str:
    return to_hex(sha256(data), prefix=prefix)


class Sha256:
    """Streaming SHA-256 hasher with update()/digest()/hexdigest()."""

    __slots__ = ("_h",)

    def __init__(self) -> None:
        self._h = hashlib.sha256()

    def update(self, data: BytesLike) -> "Sha256":
        self._h.update(ensure_bytes(data))
        return self

    def digest(self) -> bytes:
        return self._h.digest()

    def hexdigest(self, *, prefix: bool = True) -> str:
        return to_hex(self._h.digest(), prefix=prefix)

    def copy(self) -> "Sha256":
        c = object.__new__(Sha256)
        c._h = self._h.copy()
        return c


__all__ = [
    "HASH_LENGTH",
    "ZERO_HASH",
    "sha256",
    "sha256_hex",
    "Sha256",
]
