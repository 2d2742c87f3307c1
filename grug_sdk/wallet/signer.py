"""
grug_sdk.wallet.signer
======================

ECDSA signing keys for grug accounts.

This module provides a thin, well-typed facade over `cryptography`'s EC
primitives for the two curves the account factory accepts (secp256k1 and
secp256r1). Keys are held in memory only; persisting them is the caller's
business.

Key features
------------
- Signs the 32-byte sign-bytes digest directly (prehashed ECDSA), so the
  signature commits to exactly what `create_sign_bytes` produced
- Fixed-size 64-byte ``r || s`` signatures, normalised to low-s
- 33-byte compressed SEC1 public keys, as used by `derive_salt`
- `create_and_sign_tx` builds the signed `Tx` envelope in one step
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Sequence, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, utils

from ..address import KeyType
from ..errors import InvalidKeyType
from ..tx.encode import create_sign_bytes
from ..types.core import Message, Tx

__all__ = [
    "SigningKey",
    "Secp256k1SigningKey",
    "Secp256r1SigningKey",
    "signing_key_from_bytes",
    "generate_signing_key",
    "verify_signature",
]

_PREHASHED = ec.ECDSA(utils.Prehashed(hashes.SHA256()))


class SigningKey(ABC):
    """
    Base class for in-memory signing keys.

    Create instances via:
        - Secp256k1SigningKey.from_bytes(...) / .generate()
        - Secp256r1SigningKey.from_bytes(...) / .generate()
        - signing_key_from_bytes(key_type, ...) convenience
    """

    KEY_TYPE: ClassVar[KeyType]

    @property
    def key_type(self) -> KeyType:
        return self.KEY_TYPE

    @abstractmethod
    def public_key_bytes(self) -> bytes:
        ...

    @abstractmethod
    def sign_digest(self, digest: bytes) -> bytes:
        ...

    @abstractmethod
    def verify_digest(self, digest: bytes, signature: bytes) -> bool:
        ...

    def create_and_sign_tx(
        self,
        msgs: Sequence[Message],
        sender: str,
        chain_id: str,
        sequence: int,
    ) -> Tx:
        """Sign the canonical sign-bytes for ``(msgs, sender, chain_id, sequence)`` and wrap them in a Tx."""
        sign_bytes = create_sign_bytes(msgs, sender, chain_id, sequence)
        return Tx(sender=sender, msgs=tuple(msgs), credential=self.sign_digest(sign_bytes))


class _EcdsaSigningKey(SigningKey):
    CURVE: ClassVar[ec.EllipticCurve]
    ORDER: ClassVar[int]

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        if private_key.curve.name != self.CURVE.name:
            raise InvalidKeyType(private_key.curve.name)
        self._sk = private_key

    @classmethod
    def from_bytes(cls, secret: bytes) -> "_EcdsaSigningKey":
        if len(secret) != 32:
            raise ValueError(f"private key must be 32 bytes, got {len(secret)}")
        return cls(ec.derive_private_key(int.from_bytes(secret, "big"), cls.CURVE))

    @classmethod
    def generate(cls) -> "_EcdsaSigningKey":
        return cls(ec.generate_private_key(cls.CURVE))

    def public_key_bytes(self) -> bytes:
        return self._sk.public_key().public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.CompressedPoint
        )

    def sign_digest(self, digest: bytes) -> bytes:
        if len(digest) != 32:
            raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
        r, s = utils.decode_dss_signature(self._sk.sign(bytes(digest), _PREHASHED))
        if s > self.ORDER // 2:
            s = self.ORDER - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def verify_digest(self, digest: bytes, signature: bytes) -> bool:
        return verify_signature(self.public_key_bytes(), digest, signature, self.KEY_TYPE)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(public_key=0x{self.public_key_bytes().hex()})"


class Secp256k1SigningKey(_EcdsaSigningKey):
    KEY_TYPE = KeyType.SECP256K1
    CURVE = ec.SECP256K1()
    ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class Secp256r1SigningKey(_EcdsaSigningKey):
    KEY_TYPE = KeyType.SECP256R1
    CURVE = ec.SECP256R1()
    ORDER = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551


_BY_TYPE = {
    KeyType.SECP256K1: Secp256k1SigningKey,
    KeyType.SECP256R1: Secp256r1SigningKey,
}


def signing_key_from_bytes(key_type: Union[str, KeyType], secret: bytes) -> SigningKey:
    return _BY_TYPE[KeyType.parse(key_type)].from_bytes(secret)


def generate_signing_key(key_type: Union[str, KeyType] = KeyType.SECP256K1) -> SigningKey:
    return _BY_TYPE[KeyType.parse(key_type)].generate()


def verify_signature(public_key: bytes, digest: bytes, signature: bytes, key_type: Optional[Union[str, KeyType]] = None) -> bool:
    """Check a 64-byte ``r || s`` signature against a compressed public key."""
    kt = KeyType.parse(key_type or KeyType.SECP256K1)
    curve = _BY_TYPE[kt].CURVE
    if len(signature) != 64:
        return False
    pk = ec.EllipticCurvePublicKey.from_encoded_point(curve, bytes(public_key))
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    try:
        pk.verify(utils.encode_dss_signature(r, s), bytes(digest), _PREHASHED)
    except InvalidSignature:
        return False
    return True
