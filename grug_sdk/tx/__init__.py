"""
grug_sdk.tx
===========

Message builders (:mod:`.build`) and sign-bytes / envelope encoding
(:mod:`.encode`). Signing and broadcasting live on
:class:`grug_sdk.client.Client` and :mod:`grug_sdk.wallet`.
"""

from __future__ import annotations

from .build import (
    AdminOption,
    SigningOptions,
    coins,
    execute,
    instantiate,
    migrate,
    resolve_admin,
    store_code,
    transfer,
    update_config,
)
from .encode import create_sign_bytes, decode_tx, encode_tx, tx_hash, tx_hash_hex

__all__ = [
    "AdminOption",
    "SigningOptions",
    "coins",
    "resolve_admin",
    "transfer",
    "store_code",
    "instantiate",
    "execute",
    "migrate",
    "update_config",
    "create_sign_bytes",
    "encode_tx",
    "decode_tx",
    "tx_hash",
    "tx_hash_hex",
]
