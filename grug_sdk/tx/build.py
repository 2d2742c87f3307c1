"""
grug_sdk.tx.build
=================

Builders for grug messages (transfer / store_code / instantiate / execute /
migrate / update_config), the signing options `Client.send_tx` consumes, and
admin resolution for instantiate.

The builders return the dataclass variants from `grug_sdk.types.core`; feed a
list of them to `Client.send_tx` (or `SigningKey.create_and_sign_tx`).

Design notes
------------
- Amounts may be given as ints or `Coin`s; they always end up as decimal
  strings on the wire.
- `instantiate` resolves the admin option before building the message, so
  `AdminOption.SELF` becomes the address the chain will assign, computed with
  `derive_address(sender, code_hash, salt)`.

Examples
--------
    from grug_sdk.tx.build import AdminOption, instantiate, transfer

    msg = transfer("0x...", {"uatom": 100})
    msg = instantiate(sender, code_hash, {"config": {}}, b"salt", admin=AdminOption.SELF)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union

from ..address import derive_address
from ..types.core import Coin, Config, Execute, Instantiate, Migrate, StoreCode, Transfer, UpdateConfig

if TYPE_CHECKING:  # pragma: no cover
    from ..wallet.signer import SigningKey


class AdminOption(enum.Enum):
    """Symbolic admin choices for instantiate; an explicit address is passed as a plain str."""

    SELF = "self"
    NONE = "none"


Admin = Union[str, AdminOption, None]

CoinsLike = Union[Sequence[Coin], Mapping[str, int], None]


@dataclass(frozen=True)
class SigningOptions:
    """
    Who signs a transaction and, optionally, in which context.

    `chain_id` / `sequence` left as None are looked up from the chain by
    `Client.send_tx`. `sequence=0` is a real sequence, not "unset".
    """

    sender: str
    signing_key: "SigningKey"
    chain_id: Optional[str] = None
    sequence: Optional[int] = None


def coins(value: CoinsLike) -> tuple:
    """Normalise ``{denom: amount}`` or a sequence of Coins to a tuple of Coins."""
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return tuple(Coin.of(denom, amount) for denom, amount in value.items())
    return tuple(value)


def resolve_admin(admin: Admin, deployer: str, code_hash: bytes, salt: bytes) -> Optional[str]:
    # "self" / "none" are accepted as spelled-out options; addresses are 0x-hex.
    if isinstance(admin, str) and admin.lower() in ("self", "none"):
        admin = AdminOption(admin.lower())
    if admin is AdminOption.SELF:
        return derive_address(deployer, code_hash, salt)
    if admin is AdminOption.NONE or admin is None:
        return None
    return str(admin)


def transfer(to: str, amount: CoinsLike) -> Transfer:
    return Transfer(to=to, coins=coins(amount))


def store_code(wasm_byte_code: bytes) -> StoreCode:
    return StoreCode(wasm_byte_code=bytes(wasm_byte_code))


def instantiate(
    sender: str,
    code_hash: bytes,
    msg: Any,
    salt: bytes,
    *,
    funds: CoinsLike = None,
    admin: Admin = None,
) -> Instantiate:
    code_hash = bytes(code_hash)
    salt = bytes(salt)
    return Instantiate(
        code_hash=code_hash,
        msg=msg,
        salt=salt,
        funds=coins(funds),
        admin=resolve_admin(admin, sender, code_hash, salt),
    )


def execute(contract: str, msg: Any, *, funds: CoinsLike = None) -> Execute:
    return Execute(contract=contract, msg=msg, funds=coins(funds))


def migrate(contract: str, new_code_hash: bytes, msg: Any) -> Migrate:
    return Migrate(contract=contract, new_code_hash=bytes(new_code_hash), msg=msg)


def update_config(new_cfg: Config) -> UpdateConfig:
    return UpdateConfig(new_cfg=new_cfg)


__all__ = [
    "AdminOption",
    "Admin",
    "SigningOptions",
    "coins",
    "resolve_admin",
    "transfer",
    "store_code",
    "instantiate",
    "execute",
    "migrate",
    "update_config",
]
