"""
grug_sdk.tx.encode
==================

Canonical sign-bytes and broadcast encoding for grug transactions.

Sign-bytes (what every signer commits to):

    sha256( serialize(msgs) || utf8(sender) || utf8(chain_id) || be32(sequence) )

The concatenation order and the 4-byte big-endian sequence are part of the
wire contract; changing either invalidates every signature on the chain.

API
---
- create_sign_bytes(msgs, sender, chain_id, sequence) -> bytes (32)
- encode_tx(tx) -> bytes          # payload for broadcast_tx_sync
- decode_tx(raw) -> Tx
- tx_hash(raw) -> bytes / tx_hash_hex(raw) -> str (uppercase, as CometBFT reports it)
"""

from __future__ import annotations

from typing import Sequence

from ..types.core import Message, Tx
from ..utils.bytes import encode_big_endian32, encode_utf8
from ..utils.hash import Sha256, sha256
from ..utils.serde import deserialize, serialize

__all__ = ["create_sign_bytes", "encode_tx", "decode_tx", "tx_hash", "tx_hash_hex"]


def create_sign_bytes(msgs: Sequence[Message], sender: str, chain_id: str, sequence: int) -> bytes:
    h = Sha256()
    h.update(serialize(list(msgs)))
    h.update(encode_utf8(sender))
    h.update(encode_utf8(chain_id))
    h.update(encode_big_endian32(sequence))
    return h.digest()


def encode_tx(tx: Tx) -> bytes:
    return serialize(tx)


def decode_tx(raw: bytes) -> Tx:
    return Tx.from_wire(deserialize(raw))


def tx_hash(raw: bytes) -> bytes:
    """CometBFT identifies a tx by the SHA-256 of its raw bytes."""
    return sha256(bytes(raw))


def tx_hash_hex(raw: bytes) -> str:
    return tx_hash(raw).hex().upper()
