"""
Shared pieces of the RPC transports: the Transport protocol the client talks
to, the decoded ABCI / broadcast responses, and JSON-RPC 2.0 envelope helpers
used by both the HTTP and the WebSocket implementation.

CometBFT JSON-RPC encodes bytes per field: `abci_query.data` as hex, while
`broadcast_tx_sync.tx`, response `value`s and proof-op `key`/`data` are
base64. Those conversions happen here so callers only ever see `bytes`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from ..errors import JsonRpcCode, RpcError, from_jsonrpc_error
from ..utils.bytes import decode_base64, decode_hex, encode_base64, encode_hex

JSON = Union[dict, list, str, int, float, bool, None]
Params = Union[Sequence[Any], Mapping[str, Any], None]

# Methods safe to resend after a transport failure.
READ_METHODS = frozenset({"abci_query", "status", "tx", "block", "block_results", "health"})


def _now_ms() -> int:
    return int(time.time() * 1000)


def id_counter() -> Iterator[int]:
    return count(start=_now_ms())


def make_payload(method: str, params: Params, id: int) -> Dict[str, Any]:
    if params is None:
        params = {}
    elif isinstance(params, Mapping):
        params = dict(params)
    else:
        params = list(params)
    return {"jsonrpc": "2.0", "id": id, "method": method, "params": params}


def extract_result(resp: Any, *, method: str, http_status: Optional[int] = None) -> JSON:
    """Unwrap a JSON-RPC response object into its `result`, or raise RpcError."""
    if not isinstance(resp, dict):
        raise RpcError(
            method=method,
            code=JsonRpcCode.INTERNAL_ERROR,
            message="Invalid JSON-RPC response type",
            data=type(resp).__name__,
            http_status=http_status,
        )
    if resp.get("error") is not None:
        raise from_jsonrpc_error(resp["error"], method=method, http_status=http_status)
    if "result" not in resp:
        raise RpcError(
            method=method,
            code=JsonRpcCode.INTERNAL_ERROR,
            message="Malformed JSON-RPC response",
            data=resp,
            http_status=http_status,
        )
    return resp["result"]


# --- Decoded responses -------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ProofOp:
    type: str
    key: bytes
    data: bytes

    @staticmethod
    def from_rpc(d: Mapping[str, Any]) -> "ProofOp":
        return ProofOp(
            type=str(d.get("type", "")),
            key=decode_base64(d.get("key") or ""),
            data=decode_base64(d.get("data") or ""),
        )


@dataclass(slots=True, frozen=True)
class AbciQueryResponse:
    code: int
    codespace: str = ""
    log: str = ""
    value: Optional[bytes] = None
    height: int = 0
    proof_ops: List[ProofOp] = field(default_factory=list)

    @staticmethod
    def from_rpc(result: Mapping[str, Any]) -> "AbciQueryResponse":
        r = result.get("response", result)
        value = r.get("value")
        ops = (r.get("proofOps") or r.get("proof_ops") or {}).get("ops") or []
        return AbciQueryResponse(
            code=int(r.get("code") or 0),
            codespace=str(r.get("codespace") or ""),
            log=str(r.get("log") or ""),
            value=decode_base64(value) if value is not None else None,
            height=int(r.get("height") or 0),
            proof_ops=[ProofOp.from_rpc(op) for op in ops],
        )


@dataclass(slots=True, frozen=True)
class BroadcastResponse:
    code: int
    hash: str
    codespace: str = ""
    log: str = ""

    @staticmethod
    def from_rpc(result: Mapping[str, Any]) -> "BroadcastResponse":
        return BroadcastResponse(
            code=int(result.get("code") or 0),
            hash=str(result.get("hash") or ""),
            codespace=str(result.get("codespace") or ""),
            log=str(result.get("log") or ""),
        )


def abci_query_params(path: str, data: bytes, height: int, prove: bool) -> Dict[str, Any]:
    return {"path": path, "data": encode_hex(data), "height": str(int(height)), "prove": bool(prove)}


def broadcast_params(tx: bytes) -> Dict[str, Any]:
    return {"tx": encode_base64(tx)}


def tx_params(tx_hash: str, prove: bool) -> Dict[str, Any]:
    # Hashes come back from broadcast as hex; the JSON endpoint wants base64 bytes.
    return {"hash": encode_base64(decode_hex(tx_hash)), "prove": bool(prove)}


def height_params(height: Optional[int]) -> Dict[str, Any]:
    return {} if height is None else {"height": str(int(height))}


# --- Transport protocol ------------------------------------------------------


@runtime_checkable
class Transport(Protocol):
    """What `Client` needs from the network. Implemented by HttpTransport and WsTransport."""

    async def abci_query(self, path: str, data: bytes, height: int = 0, prove: bool = False) -> AbciQueryResponse: ...

    async def broadcast_tx_sync(self, tx: bytes) -> BroadcastResponse: ...

    async def request(self, method: str, params: Params = None) -> JSON: ...

    async def status(self) -> JSON: ...

    async def tx(self, tx_hash: str, prove: bool = False) -> JSON: ...

    async def block(self, height: Optional[int] = None) -> JSON: ...

    async def block_results(self, height: Optional[int] = None) -> JSON: ...

    async def close(self) -> None: ...


class JsonRpcTransport:
    """
    Mixin implementing the typed RPC methods on top of a raw `request()`.
    Subclasses provide `request(method, params)` and `close()`.
    """

    async def request(self, method: str, params: Params = None) -> JSON:  # pragma: no cover - abstract
        raise NotImplementedError

    async def close(self) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    async def abci_query(self, path: str, data: bytes, height: int = 0, prove: bool = False) -> AbciQueryResponse:
        result = await self.request("abci_query", abci_query_params(path, data, height, prove))
        return AbciQueryResponse.from_rpc(result or {})

    async def broadcast_tx_sync(self, tx: bytes) -> BroadcastResponse:
        result = await self.request("broadcast_tx_sync", broadcast_params(tx))
        return BroadcastResponse.from_rpc(result or {})

    async def status(self) -> JSON:
        return await self.request("status")

    async def tx(self, tx_hash: str, prove: bool = False) -> JSON:
        return await self.request("tx", tx_params(tx_hash, prove))

    async def block(self, height: Optional[int] = None) -> JSON:
        return await self.request("block", height_params(height))

    async def block_results(self, height: Optional[int] = None) -> JSON:
        return await self.request("block_results", height_params(height))


__all__ = [
    "JSON",
    "Params",
    "READ_METHODS",
    "ProofOp",
    "AbciQueryResponse",
    "BroadcastResponse",
    "Transport",
    "JsonRpcTransport",
    "make_payload",
    "extract_result",
    "id_counter",
]
