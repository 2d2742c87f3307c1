"""
Typed error classes for the Python SDK.

These are raised by the RPC transports, the query engine, the transaction
builder, proof checks and the wallet connection layer so callers can catch
specific failure modes while still being able to catch the base
`GrugSdkError`.

Errors that originate on the node (`QueryFailed`, `BroadcastFailed`) carry the
node-reported `codespace` / `code` / `log` verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "GrugSdkError",
    "JsonRpcCode",
    "RpcError",
    "QueryFailed",
    "ProofValidationError",
    "UnexpectedResponseShape",
    "BroadcastFailed",
    "UserRejected",
    "NoConnectorForChain",
    "ConnectorNotFound",
    "ProviderNotFound",
    "InvalidSelector",
    "InvalidKeyType",
    "InvalidConnectionState",
    "from_jsonrpc_error",
]


class GrugSdkError(Exception):
    """Base class for all SDK errors."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 reserved codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # Client-side transport failure (never sent by a node)
    TRANSPORT_FAILED = -32098


@dataclass(slots=True, eq=False)
class RpcError(GrugSdkError):
    """Raised when a JSON-RPC call returns an error object or the transport fails."""

    method: Optional[str]
    code: int
    message: str
    data: Optional[Any] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True, eq=False)
class QueryFailed(GrugSdkError):
    """An ABCI query returned a non-zero code. Never retried by the SDK."""

    codespace: str
    code: int
    log: str
    path: Optional[str] = None

    def __str__(self) -> str:
        return f"query failed! codespace: {self.codespace}, code: {self.code}, log: {self.log}"


@dataclass(slots=True, eq=False)
class ProofValidationError(GrugSdkError):
    """
    Raised when a store proof returned by the node cannot be trusted.

    Fields:
      - message: what check failed
      - key: the key that was requested (if relevant)
      - found: the offending value reported by the node (op count, op type, key)
    """

    message: str
    key: Optional[bytes] = None
    found: Optional[Any] = None

    def __str__(self) -> str:
        bits = [self.message]
        if self.key is not None:
            bits.append(f"key=0x{self.key.hex()}")
        if self.found is not None:
            found = self.found.hex() if isinstance(self.found, (bytes, bytearray)) else self.found
            bits.append(f"found={found}")
        return "ProofValidationError: " + " ".join(bits)


@dataclass(slots=True, eq=False)
class UnexpectedResponseShape(GrugSdkError):
    """The node answered a query with a response variant other than the one requested."""

    expected: str
    got: Any

    def __str__(self) -> str:
        return f"expecting {self.expected} response, got {self.got!r}"


@dataclass(slots=True, eq=False)
class BroadcastFailed(GrugSdkError):
    """CheckTx rejected a broadcast transaction."""

    codespace: str
    code: int
    log: str
    tx_hash: Optional[str] = None

    def __str__(self) -> str:
        suffix = f" tx={self.tx_hash}" if self.tx_hash else ""
        return (
            f"failed to broadcast tx! codespace: {self.codespace}, code: {self.code}, "
            f"log: {self.log}{suffix}"
        )


@dataclass(slots=True, eq=False)
class UserRejected(GrugSdkError):
    """The user declined a wallet prompt (account access, signature, passkey)."""

    connector_id: str
    reason: Optional[str] = None

    def __str__(self) -> str:
        why = f": {self.reason}" if self.reason else ""
        return f"request rejected by user in connector {self.connector_id!r}{why}"


@dataclass(slots=True, eq=False)
class NoConnectorForChain(GrugSdkError):
    chain_id: str

    def __str__(self) -> str:
        return f"no connector found for chain {self.chain_id!r}"


@dataclass(slots=True, eq=False)
class ConnectorNotFound(GrugSdkError):
    connector_id: str

    def __str__(self) -> str:
        return f"connector {self.connector_id!r} is not registered"


@dataclass(slots=True, eq=False)
class ProviderNotFound(GrugSdkError):
    """An injected connector found no provider object in its host environment."""

    connector_id: str

    def __str__(self) -> str:
        return f"provider not found for connector {self.connector_id!r}"


@dataclass(slots=True, eq=False)
class InvalidSelector(GrugSdkError):
    message: str = "exactly one of connector_uid or chain_id must be provided"

    def __str__(self) -> str:
        return f"InvalidSelector: {self.message}"


@dataclass(slots=True, eq=False)
class InvalidKeyType(GrugSdkError):
    key_type: Any

    def __str__(self) -> str:
        return f"unsupported public key type: {self.key_type!r}"


@dataclass(slots=True, eq=False)
class InvalidConnectionState(GrugSdkError):
    """A connection snapshot broke one of its table invariants; it is never published."""

    message: str

    def __str__(self) -> str:
        return f"InvalidConnectionState: {self.message}"


def from_jsonrpc_error(
    err_obj: Dict[str, Any],
    *,
    method: Optional[str] = None,
    http_status: Optional[int] = None,
) -> RpcError:
    """
    Convert a JSON-RPC error object into RpcError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    message = str(err_obj.get("message", "Unknown JSON-RPC error"))
    return RpcError(
        method=method,
        code=code,
        message=message,
        data=err_obj.get("data"),
        http_status=http_status,
    )
