"""
grug_sdk.rpc
------------

RPC transports.

This package exposes:
- HttpTransport: JSON-RPC over HTTP (see .http)
- WsTransport:   JSON-RPC over a WebSocket (see .ws)
- connect_transport(url): pick one of the above from the URL scheme

Import style:

    from grug_sdk.rpc import connect_transport
    rpc = connect_transport("http://localhost:26657")
"""

from __future__ import annotations

from typing import Any, Union
from urllib.parse import urlparse

from .base import AbciQueryResponse, BroadcastResponse, JsonRpcTransport, ProofOp, Transport
from .http import HttpTransport
from .ws import WsTransport


def connect_transport(url: str, **kwargs: Any) -> Union[HttpTransport, WsTransport]:
    """Build the transport matching *url*'s scheme; extra kwargs go to its constructor."""
    scheme = urlparse(url).scheme.lower()
    if scheme in ("http", "https"):
        return HttpTransport(url, **kwargs)
    if scheme in ("ws", "wss"):
        return WsTransport(url, **kwargs)
    raise ValueError(f"unsupported RPC URL scheme {scheme!r} in {url!r}")


__all__ = [
    "AbciQueryResponse",
    "BroadcastResponse",
    "ProofOp",
    "Transport",
    "JsonRpcTransport",
    "HttpTransport",
    "WsTransport",
    "connect_transport",
]
