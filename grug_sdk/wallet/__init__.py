"""In-memory signing keys. See :mod:`grug_sdk.wallet.signer`."""

from __future__ import annotations

from .signer import (
    Secp256k1SigningKey,
    Secp256r1SigningKey,
    SigningKey,
    generate_signing_key,
    signing_key_from_bytes,
    verify_signature,
)

__all__ = [
    "SigningKey",
    "Secp256k1SigningKey",
    "Secp256r1SigningKey",
    "signing_key_from_bytes",
    "generate_signing_key",
    "verify_signature",
]
