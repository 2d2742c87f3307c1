"""
Core wire types for the Python SDK.

This module provides two complementary representations for common objects:
- Lightweight `TypedDict` shapes mirroring the JSON the node speaks.
- Ergonomic `@dataclass` models with bytes-friendly fields and
  `.to_wire()` / `.from_wire()` converters.

Tagged unions (`Message`, `QueryRequest`, `QueryResponse`) serialise as a map
with exactly one key, the variant tag, whose value is the variant body:

    {"transfer": {"to": "0x...", "coins": [{"denom": "uatom", "amount": "1"}]}}

Wire tags are snake_case, matching the chain's serde settings. Binary fields
use the encoding fixed by the schema:

    code hashes            -> hex (no prefix)
    wasm byte code, salts  -> base64
    contract payloads      -> base64(serialize(payload))
    raw storage keys/values-> base64

Nothing here performs network I/O; these are just types and converters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypedDict

from ..errors import UnexpectedResponseShape
from ..utils.bytes import decode_base64, decode_hex, encode_base64, encode_hex
from ..utils.serde import deserialize, serialize

# --- Common aliases ----------------------------------------------------------

Address = str  # 0x-prefixed hex, 32 bytes
Hash = str  # hex string (no prefix) as used on the wire
ChainId = str
Json = Any  # anything serde.serialize accepts

_DECIMAL_RE = re.compile(r"^[0-9]+$")


# --- JSON TypedDict shapes ---------------------------------------------------


class CoinDict(TypedDict):
    denom: str
    amount: str


class AccountDict(TypedDict, total=False):
    address: Address
    code_hash: Hash
    admin: Optional[Address]


class InfoDict(TypedDict, total=False):
    chain_id: ChainId
    config: Dict[str, Any]
    last_finalized_block: Dict[str, Any]


class TxDict(TypedDict):
    sender: Address
    msgs: List[Dict[str, Any]]
    credential: str


# --- Plain value types -------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Coin:
    """A denomination and an amount; the amount travels as a decimal string."""

    denom: str
    amount: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, str) or not _DECIMAL_RE.match(self.amount):
            raise ValueError(f"coin amount must be a non-negative decimal string, got {self.amount!r}")

    @classmethod
    def of(cls, denom: str, amount: int) -> "Coin":
        if int(amount) < 0:
            raise ValueError("coin amount must be non-negative")
        return cls(denom=denom, amount=str(int(amount)))

    @property
    def amount_int(self) -> int:
        return int(self.amount)

    def to_wire(self) -> CoinDict:
        return {"denom": self.denom, "amount": self.amount}

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "Coin":
        return Coin(denom=str(d["denom"]), amount=str(d["amount"]))


def coins_to_wire(coins: Sequence[Coin]) -> List[CoinDict]:
    return [c.to_wire() for c in coins]


def coins_from_wire(items: Sequence[Mapping[str, Any]]) -> List[Coin]:
    return [Coin.from_wire(c) for c in items]


@dataclass(slots=True, frozen=True)
class Config:
    """Chain-level configuration. `owner=None` means nobody may update it."""

    owner: Optional[Address] = None
    bank: Optional[Address] = None

    def to_wire(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.owner is not None:
            d["owner"] = self.owner
        if self.bank is not None:
            d["bank"] = self.bank
        return d

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "Config":
        return Config(owner=d.get("owner"), bank=d.get("bank"))


@dataclass(slots=True, frozen=True)
class InfoResponse:
    chain_id: ChainId
    config: Config = field(default_factory=Config)
    last_finalized_block: Optional[Dict[str, Any]] = None

    def to_wire(self) -> InfoDict:
        d: InfoDict = {"chain_id": self.chain_id, "config": self.config.to_wire()}
        if self.last_finalized_block is not None:
            d["last_finalized_block"] = dict(self.last_finalized_block)
        return d

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "InfoResponse":
        return InfoResponse(
            chain_id=str(d["chain_id"]),
            config=Config.from_wire(d.get("config") or {}),
            last_finalized_block=d.get("last_finalized_block"),
        )


@dataclass(slots=True, frozen=True)
class AccountResponse:
    """
    On-chain account. `admin=None` is "no admin"; a self-administered contract
    has `admin == address`. The two states are distinct on the wire.
    """

    address: Address
    code_hash: Hash
    admin: Optional[Address] = None

    def to_wire(self) -> AccountDict:
        d: AccountDict = {"address": self.address, "code_hash": self.code_hash}
        if self.admin is not None:
            d["admin"] = self.admin
        return d

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "AccountResponse":
        return AccountResponse(
            address=str(d["address"]),
            code_hash=str(d["code_hash"]),
            admin=d.get("admin"),
        )


@dataclass(slots=True, frozen=True)
class WasmRawResponse:
    contract: Address
    key: bytes
    value: Optional[bytes] = None

    def to_wire(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"contract": self.contract, "key": encode_base64(self.key)}
        if self.value is not None:
            d["value"] = encode_base64(self.value)
        return d

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "WasmRawResponse":
        value = d.get("value")
        return WasmRawResponse(
            contract=str(d["contract"]),
            key=decode_base64(d["key"]),
            value=decode_base64(value) if value is not None else None,
        )


@dataclass(slots=True, frozen=True)
class WasmSmartResponse:
    contract: Address
    data: bytes

    def decode(self) -> Json:
        return deserialize(self.data)

    def to_wire(self) -> Dict[str, Any]:
        return {"contract": self.contract, "data": encode_base64(self.data)}

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "WasmSmartResponse":
        return WasmSmartResponse(contract=str(d["contract"]), data=decode_base64(d["data"]))


# --- Tagged-union plumbing ---------------------------------------------------


def _split_tagged(obj: Any, what: str) -> Tuple[str, Mapping[str, Any]]:
    if not isinstance(obj, Mapping) or len(obj) != 1:
        raise UnexpectedResponseShape(expected=f"single-key {what}", got=obj)
    ((tag, body),) = obj.items()
    return str(tag), body


def _opt(d: Dict[str, Any], key: str, value: Any) -> None:
    # Absent optionals are omitted from the wire, not sent as null.
    if value is not None:
        d[key] = value


def _payload_to_wire(msg: Json) -> str:
    return encode_base64(serialize(msg))


def _payload_from_wire(s: str) -> Json:
    return deserialize(decode_base64(s))


# --- Messages ----------------------------------------------------------------


class Message:
    """
    Base of the Message tagged union. Exactly one tag per instance; subclasses
    set `TAG` and implement `_body()` / `_from_body()`.
    """

    TAG: ClassVar[str] = ""
    _VARIANTS: ClassVar[Dict[str, Type["Message"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TAG:
            Message._VARIANTS[cls.TAG] = cls

    def _body(self) -> Dict[str, Any]:  # pragma: no cover - abstract
        raise NotImplementedError

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "Message":  # pragma: no cover - abstract
        raise NotImplementedError

    def to_wire(self) -> Dict[str, Any]:
        return {self.TAG: self._body()}

    @staticmethod
    def from_wire(obj: Any) -> "Message":
        tag, body = _split_tagged(obj, "message")
        variant = Message._VARIANTS.get(tag)
        if variant is None:
            raise UnexpectedResponseShape(expected="known message tag", got=tag)
        return variant._from_body(body)


@dataclass(frozen=True)
class Transfer(Message):
    TAG: ClassVar[str] = "transfer"

    to: Address
    coins: Tuple[Coin, ...]

    def _body(self) -> Dict[str, Any]:
        return {"to": self.to, "coins": coins_to_wire(self.coins)}

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "Transfer":
        return cls(to=body["to"], coins=tuple(coins_from_wire(body["coins"])))


@dataclass(frozen=True)
class StoreCode(Message):
    TAG: ClassVar[str] = "store_code"

    wasm_byte_code: bytes

    def _body(self) -> Dict[str, Any]:
        return {"wasm_byte_code": encode_base64(self.wasm_byte_code)}

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "StoreCode":
        return cls(wasm_byte_code=decode_base64(body["wasm_byte_code"]))


@dataclass(frozen=True)
class Instantiate(Message):
    TAG: ClassVar[str] = "instantiate"

    code_hash: bytes
    msg: Json
    salt: bytes
    funds: Tuple[Coin, ...] = ()
    admin: Optional[Address] = None

    def _body(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "code_hash": encode_hex(self.code_hash),
            "msg": _payload_to_wire(self.msg),
            "salt": encode_base64(self.salt),
            "funds": coins_to_wire(self.funds),
        }
        _opt(d, "admin", self.admin)
        return d

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "Instantiate":
        return cls(
            code_hash=decode_hex(body["code_hash"]),
            msg=_payload_from_wire(body["msg"]),
            salt=decode_base64(body["salt"]),
            funds=tuple(coins_from_wire(body.get("funds") or [])),
            admin=body.get("admin"),
        )


@dataclass(frozen=True)
class Execute(Message):
    TAG: ClassVar[str] = "execute"

    contract: Address
    msg: Json
    funds: Tuple[Coin, ...] = ()

    def _body(self) -> Dict[str, Any]:
        return {
            "contract": self.contract,
            "msg": _payload_to_wire(self.msg),
            "funds": coins_to_wire(self.funds),
        }

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "Execute":
        return cls(
            contract=body["contract"],
            msg=_payload_from_wire(body["msg"]),
            funds=tuple(coins_from_wire(body.get("funds") or [])),
        )


@dataclass(frozen=True)
class Migrate(Message):
    TAG: ClassVar[str] = "migrate"

    contract: Address
    new_code_hash: bytes
    msg: Json

    def _body(self) -> Dict[str, Any]:
        return {
            "contract": self.contract,
            "new_code_hash": encode_hex(self.new_code_hash),
            "msg": _payload_to_wire(self.msg),
        }

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "Migrate":
        return cls(
            contract=body["contract"],
            new_code_hash=decode_hex(body["new_code_hash"]),
            msg=_payload_from_wire(body["msg"]),
        )


@dataclass(frozen=True)
class UpdateConfig(Message):
    TAG: ClassVar[str] = "update_config"

    new_cfg: Config

    def _body(self) -> Dict[str, Any]:
        return {"new_cfg": self.new_cfg.to_wire()}

    @classmethod
    def _from_body(cls, body: Mapping[str, Any]) -> "UpdateConfig":
        return cls(new_cfg=Config.from_wire(body["new_cfg"]))


# --- Transaction envelope ----------------------------------------------------


@dataclass(frozen=True)
class Tx:
    """Signed transaction as broadcast to the node."""

    sender: Address
    msgs: Tuple[Message, ...]
    credential: bytes

    def to_wire(self) -> TxDict:
        return {
            "sender": self.sender,
            "msgs": [m.to_wire() for m in self.msgs],
            "credential": encode_base64(self.credential),
        }

    @staticmethod
    def from_wire(d: Mapping[str, Any]) -> "Tx":
        return Tx(
            sender=str(d["sender"]),
            msgs=tuple(Message.from_wire(m) for m in d["msgs"]),
            credential=decode_base64(d["credential"]),
        )


# --- Query responses ---------------------------------------------------------


class QueryResponse:
    """
    Base of the QueryResponse tagged union. Each variant wraps one decoded
    `value`; callers match on the subclass (see `Client._expect`).
    """

    TAG: ClassVar[str] = ""
    _VARIANTS: ClassVar[Dict[str, Type["QueryResponse"]]] = {}

    value: Any

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TAG:
            QueryResponse._VARIANTS[cls.TAG] = cls

    def _value_to_wire(self) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    @classmethod
    def _from_body(cls, body: Any) -> "QueryResponse":  # pragma: no cover - abstract
        raise NotImplementedError

    def to_wire(self) -> Dict[str, Any]:
        return {self.TAG: self._value_to_wire()}

    @staticmethod
    def from_wire(obj: Any) -> "QueryResponse":
        tag, body = _split_tagged(obj, "query response")
        variant = QueryResponse._VARIANTS.get(tag)
        if variant is None:
            raise UnexpectedResponseShape(expected="known query response", got=obj)
        return variant._from_body(body)


@dataclass(frozen=True)
class InfoQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "info"
    value: InfoResponse

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "InfoQueryResponse":
        return cls(InfoResponse.from_wire(body))


@dataclass(frozen=True)
class BalanceQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "balance"
    value: Coin

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "BalanceQueryResponse":
        return cls(Coin.from_wire(body))


@dataclass(frozen=True)
class BalancesQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "balances"
    value: Tuple[Coin, ...]

    def _value_to_wire(self) -> Any:
        return coins_to_wire(self.value)

    @classmethod
    def _from_body(cls, body: Any) -> "BalancesQueryResponse":
        return cls(tuple(coins_from_wire(body)))


@dataclass(frozen=True)
class SupplyQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "supply"
    value: Coin

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "SupplyQueryResponse":
        return cls(Coin.from_wire(body))


@dataclass(frozen=True)
class SuppliesQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "supplies"
    value: Tuple[Coin, ...]

    def _value_to_wire(self) -> Any:
        return coins_to_wire(self.value)

    @classmethod
    def _from_body(cls, body: Any) -> "SuppliesQueryResponse":
        return cls(tuple(coins_from_wire(body)))


@dataclass(frozen=True)
class CodeQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "code"
    value: bytes

    def _value_to_wire(self) -> Any:
        return encode_base64(self.value)

    @classmethod
    def _from_body(cls, body: Any) -> "CodeQueryResponse":
        return cls(decode_base64(body))


@dataclass(frozen=True)
class CodesQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "codes"
    value: Tuple[bytes, ...]

    def _value_to_wire(self) -> Any:
        return [encode_hex(h) for h in self.value]

    @classmethod
    def _from_body(cls, body: Any) -> "CodesQueryResponse":
        return cls(tuple(decode_hex(h) for h in body))


@dataclass(frozen=True)
class AccountQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "account"
    value: AccountResponse

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "AccountQueryResponse":
        return cls(AccountResponse.from_wire(body))


@dataclass(frozen=True)
class AccountsQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "accounts"
    value: Tuple[AccountResponse, ...]

    def _value_to_wire(self) -> Any:
        return [a.to_wire() for a in self.value]

    @classmethod
    def _from_body(cls, body: Any) -> "AccountsQueryResponse":
        return cls(tuple(AccountResponse.from_wire(a) for a in body))


@dataclass(frozen=True)
class WasmRawQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "wasm_raw"
    value: WasmRawResponse

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "WasmRawQueryResponse":
        return cls(WasmRawResponse.from_wire(body))


@dataclass(frozen=True)
class WasmSmartQueryResponse(QueryResponse):
    TAG: ClassVar[str] = "wasm_smart"
    value: WasmSmartResponse

    def _value_to_wire(self) -> Any:
        return self.value.to_wire()

    @classmethod
    def _from_body(cls, body: Any) -> "WasmSmartQueryResponse":
        return cls(WasmSmartResponse.from_wire(body))


# --- Query requests ----------------------------------------------------------


class QueryRequest:
    """
    Base of the QueryRequest tagged union. `RESPONSE` names the only response
    variant a node may answer with.
    """

    TAG: ClassVar[str] = ""
    RESPONSE: ClassVar[Type[QueryResponse]]

    def _body(self) -> Dict[str, Any]:  # pragma: no cover - abstract
        raise NotImplementedError

    def to_wire(self) -> Dict[str, Any]:
        return {self.TAG: self._body()}


def _page(start_after: Any, limit: Optional[int]) -> Dict[str, Any]:
    # Pagination cursors are opaque: forwarded as given, omitted when absent.
    d: Dict[str, Any] = {}
    _opt(d, "start_after", start_after)
    _opt(d, "limit", limit)
    return d


@dataclass(frozen=True)
class QueryInfo(QueryRequest):
    TAG: ClassVar[str] = "info"
    RESPONSE: ClassVar[Type[QueryResponse]] = InfoQueryResponse

    def _body(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class QueryBalance(QueryRequest):
    TAG: ClassVar[str] = "balance"
    RESPONSE: ClassVar[Type[QueryResponse]] = BalanceQueryResponse

    address: Address
    denom: str

    def _body(self) -> Dict[str, Any]:
        return {"address": self.address, "denom": self.denom}


@dataclass(frozen=True)
class QueryBalances(QueryRequest):
    TAG: ClassVar[str] = "balances"
    RESPONSE: ClassVar[Type[QueryResponse]] = BalancesQueryResponse

    address: Address
    start_after: Optional[str] = None
    limit: Optional[int] = None

    def _body(self) -> Dict[str, Any]:
        return {"address": self.address, **_page(self.start_after, self.limit)}


@dataclass(frozen=True)
class QuerySupply(QueryRequest):
    TAG: ClassVar[str] = "supply"
    RESPONSE: ClassVar[Type[QueryResponse]] = SupplyQueryResponse

    denom: str

    def _body(self) -> Dict[str, Any]:
        return {"denom": self.denom}


@dataclass(frozen=True)
class QuerySupplies(QueryRequest):
    TAG: ClassVar[str] = "supplies"
    RESPONSE: ClassVar[Type[QueryResponse]] = SuppliesQueryResponse

    start_after: Optional[str] = None
    limit: Optional[int] = None

    def _body(self) -> Dict[str, Any]:
        return _page(self.start_after, self.limit)


@dataclass(frozen=True)
class QueryCode(QueryRequest):
    TAG: ClassVar[str] = "code"
    RESPONSE: ClassVar[Type[QueryResponse]] = CodeQueryResponse

    hash: Hash

    def _body(self) -> Dict[str, Any]:
        return {"hash": self.hash}


@dataclass(frozen=True)
class QueryCodes(QueryRequest):
    TAG: ClassVar[str] = "codes"
    RESPONSE: ClassVar[Type[QueryResponse]] = CodesQueryResponse

    start_after: Optional[Hash] = None
    limit: Optional[int] = None

    def _body(self) -> Dict[str, Any]:
        return _page(self.start_after, self.limit)


@dataclass(frozen=True)
class QueryAccount(QueryRequest):
    TAG: ClassVar[str] = "account"
    RESPONSE: ClassVar[Type[QueryResponse]] = AccountQueryResponse

    address: Address

    def _body(self) -> Dict[str, Any]:
        return {"address": self.address}


@dataclass(frozen=True)
class QueryAccounts(QueryRequest):
    TAG: ClassVar[str] = "accounts"
    RESPONSE: ClassVar[Type[QueryResponse]] = AccountsQueryResponse

    start_after: Optional[Address] = None
    limit: Optional[int] = None

    def _body(self) -> Dict[str, Any]:
        return _page(self.start_after, self.limit)


@dataclass(frozen=True)
class QueryWasmRaw(QueryRequest):
    TAG: ClassVar[str] = "wasm_raw"
    RESPONSE: ClassVar[Type[QueryResponse]] = WasmRawQueryResponse

    contract: Address
    key: bytes

    def _body(self) -> Dict[str, Any]:
        return {"contract": self.contract, "key": encode_base64(self.key)}


@dataclass(frozen=True)
class QueryWasmSmart(QueryRequest):
    TAG: ClassVar[str] = "wasm_smart"
    RESPONSE: ClassVar[Type[QueryResponse]] = WasmSmartQueryResponse

    contract: Address
    msg: Json

    def _body(self) -> Dict[str, Any]:
        return {"contract": self.contract, "msg": _payload_to_wire(self.msg)}


__all__ = [
    # aliases
    "Address",
    "Hash",
    "ChainId",
    "Json",
    # TypedDicts
    "CoinDict",
    "AccountDict",
    "InfoDict",
    "TxDict",
    # values
    "Coin",
    "coins_to_wire",
    "coins_from_wire",
    "Config",
    "InfoResponse",
    "AccountResponse",
    "WasmRawResponse",
    "WasmSmartResponse",
    # messages
    "Message",
    "Transfer",
    "StoreCode",
    "Instantiate",
    "Execute",
    "Migrate",
    "UpdateConfig",
    "Tx",
    # queries
    "QueryRequest",
    "QueryInfo",
    "QueryBalance",
    "QueryBalances",
    "QuerySupply",
    "QuerySupplies",
    "QueryCode",
    "QueryCodes",
    "QueryAccount",
    "QueryAccounts",
    "QueryWasmRaw",
    "QueryWasmSmart",
    "QueryResponse",
    "InfoQueryResponse",
    "BalanceQueryResponse",
    "BalancesQueryResponse",
    "SupplyQueryResponse",
    "SuppliesQueryResponse",
    "CodeQueryResponse",
    "CodesQueryResponse",
    "AccountQueryResponse",
    "AccountsQueryResponse",
    "WasmRawQueryResponse",
    "WasmSmartQueryResponse",
]
