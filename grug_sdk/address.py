"""
grug_sdk.address
================

Address derivation and validation utilities for grug chains.

Format
------
Addresses are 32 raw bytes rendered as a ``0x``-prefixed lowercase hex string.
Contract (and account) addresses are never picked by the user; they are
derived from the deployer, the code hash and a salt:

    address = sha256(raw(deployer) || code_hash || salt)

so the address of an ``instantiate`` can be computed client-side before the
transaction confirms. The standard account factory derives its salts from the
owner's public key:

    salt = sha256(utf8(key_type) || public_key || be32(serial))

Both functions are pure and can be reproduced by any party (indexers, wallets)
without touching the chain.

This module provides:
- derive_address(deployer, code_hash, salt) -> str
- derive_salt(key_type, public_key, serial) -> bytes
- compute_code_hash(code) -> bytes
- to_bytes(address) -> bytes
- normalize(address) -> str
- validate(address) -> bool / is_valid (alias)
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import InvalidKeyType
from .utils.bytes import BytesLike, encode_big_endian32, from_hex, to_hex
from .utils.hash import HASH_LENGTH, Sha256, sha256

ADDRESS_LENGTH = 32

__all__ = [
    "ADDRESS_LENGTH",
    "Address",
    "KeyType",
    "AddressError",
    "derive_address",
    "derive_salt",
    "compute_code_hash",
    "to_bytes",
    "normalize",
    "validate",
    "is_valid",
]

Address = str


class KeyType(str, Enum):
    """Public key algorithms the account factory accepts."""

    SECP256K1 = "secp256k1"
    SECP256R1 = "secp256r1"

    @classmethod
    def parse(cls, value: Union[str, "KeyType"]) -> "KeyType":
        if isinstance(value, KeyType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidKeyType(value) from None


# ---- Errors -----------------------------------------------------------------


class AddressError(ValueError):
    """Raised for malformed or invalid addresses."""


# ---- Core API ----------------------------------------------------------------


def to_bytes(address: Address) -> bytes:
    """Decode an address string into its raw bytes. The ``0x`` prefix is stripped first."""
    if not isinstance(address, str) or not address:
        raise AddressError("address must be a non-empty string")
    try:
        raw = from_hex(address)
    except ValueError as e:
        raise AddressError(f"address is not valid hex: {address!r}") from e
    if len(raw) != ADDRESS_LENGTH:
        raise AddressError(f"address must be {ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw


def normalize(address: Address) -> Address:
    """Canonical form: ``0x`` + lowercase hex."""
    return to_hex(to_bytes(address))


def validate(address: str) -> bool:
    """Return True if *address* is a well-formed 32-byte hex address."""
    try:
        to_bytes(address)
        return True
    except AddressError:
        return False


is_valid = validate


def derive_address(deployer: Address, code_hash: BytesLike, salt: BytesLike) -> Address:
    """
    Derive a contract address from the deployer address, code hash, and salt.

    Mirrors the chain's ``Addr::compute``.
    """
    code_hash = bytes(code_hash)
    if len(code_hash) != HASH_LENGTH:
        raise AddressError(f"code hash must be {HASH_LENGTH} bytes, got {len(code_hash)}")
    hasher = Sha256()
    hasher.update(to_bytes(deployer))
    hasher.update(code_hash)
    hasher.update(bytes(salt))
    return to_hex(hasher.digest())


def derive_salt(key_type: Union[str, KeyType], public_key: BytesLike, serial: int) -> bytes:
    """
    Derive the salt the standard account factory uses to register accounts.

    Raises InvalidKeyType for algorithms outside :class:`KeyType`, and
    ValueError if *serial* does not fit in 32 bits.
    """
    kt = KeyType.parse(key_type)
    hasher = Sha256()
    hasher.update(kt.value.encode("utf-8"))
    hasher.update(bytes(public_key))
    hasher.update(encode_big_endian32(serial))
    return hasher.digest()


def compute_code_hash(code: BytesLike) -> bytes:
    """Content address of uploaded code: identical bytes always hash the same."""
    return sha256(bytes(code))
