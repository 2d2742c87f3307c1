from __future__ import annotations

"""
WebSocket JSON-RPC transport (async) for CometBFT `/websocket` endpoints.

- Uses the `websockets` package.
- Correlates responses to requests by `id`; frames without a pending id
  (event notifications) are ignored.
- Connects lazily on the first request and again after the socket drops.
  Pending requests fail with RpcError when the connection is lost; requests
  are not replayed, so a broadcast is never sent twice.

Example:
    from grug_sdk.rpc.ws import WsTransport

    async with WsTransport("ws://127.0.0.1:26657/websocket") as rpc:
        status = await rpc.status()
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import ConnectionClosed

from ..errors import JsonRpcCode, RpcError
from ..version import __version__ as SDK_VERSION
from .base import JSON, JsonRpcTransport, Params, extract_result, id_counter, make_payload

log = logging.getLogger(__name__)


@dataclass
class WsTransport(JsonRpcTransport):
    url: str
    headers: Optional[Mapping[str, str]] = None
    connect_timeout: float = 15.0
    request_timeout: float = 10.0
    ping_interval: Optional[float] = 20.0
    _id_counter: Iterator[int] = field(init=False, default_factory=id_counter)
    _ws: Optional[ClientConnection] = field(init=False, default=None)
    _reader_task: Optional[asyncio.Task] = field(init=False, default=None)
    _pending: Dict[int, asyncio.Future] = field(init=False, default_factory=dict)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)
    _closing: bool = field(init=False, default=False)

    # ------------- context manager -------------

    async def __aenter__(self) -> "WsTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    # ------------- lifecycle -------------------

    async def connect(self) -> ClientConnection:
        """Open the socket (if not already open) and start the reader loop."""
        async with self._lock:
            if self._ws is not None:
                return self._ws
            self._closing = False
            hdrs = {"User-Agent": f"grug-sdk-py/{SDK_VERSION}"}
            if self.headers:
                hdrs.update(dict(self.headers))
            try:
                ws = await ws_connect(
                    self.url,
                    additional_headers=hdrs,
                    open_timeout=self.connect_timeout,
                    ping_interval=self.ping_interval,
                )
            except (OSError, asyncio.TimeoutError, ConnectionClosed) as e:
                raise RpcError(
                    method=None,
                    code=JsonRpcCode.TRANSPORT_FAILED,
                    message="WS connect failed",
                    data=str(e),
                ) from e
            log.debug("ws: connected to %s", self.url)
            self._ws = ws
            self._reader_task = asyncio.create_task(self._reader_loop(ws), name="WsTransport.reader")
            return ws

    async def close(self) -> None:
        """Close the socket, stop the reader and fail whatever is still pending."""
        self._closing = True
        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
        self._reader_task = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        self._fail_pending("WS closed")

    # ------------- RPC primitives --------------

    async def request(self, method: str, params: Params = None) -> JSON:
        """Send a JSON-RPC request and await the matching response."""
        ws = self._ws or await self.connect()

        id = next(self._id_counter)
        payload = make_payload(method, params, id)
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[id] = fut
        log.debug("ws: -> %s id=%s", method, id)

        try:
            await asyncio.wait_for(
                ws.send(json.dumps(payload, separators=(",", ":"))),
                timeout=self.request_timeout,
            )
        except (ConnectionClosed, asyncio.TimeoutError) as e:
            self._pending.pop(id, None)
            raise RpcError(method=method, code=JsonRpcCode.TRANSPORT_FAILED, message="WS send failed", data=str(e)) from e

        try:
            resp = await asyncio.wait_for(fut, timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            raise RpcError(method=method, code=JsonRpcCode.TRANSPORT_FAILED, message="WS request timed out") from e
        finally:
            self._pending.pop(id, None)
        return extract_result(resp, method=method)

    # ------------- internals --------------------

    def _fail_pending(self, reason: str) -> None:
        for fut in list(self._pending.values()):
            if not fut.done():
                fut.set_exception(RpcError(method=None, code=JsonRpcCode.TRANSPORT_FAILED, message=reason))
        self._pending.clear()

    async def _reader_loop(self, ws: ClientConnection) -> None:
        """Read frames from *ws* and resolve the future waiting on each response id."""
        while True:
            try:
                msg = await ws.recv()
            except ConnectionClosed as e:
                if not self._closing:
                    log.warning("ws: connection to %s lost: %s", self.url, e)
                # Next request reconnects.
                if self._ws is ws:
                    self._ws = None
                self._fail_pending("WS disconnected")
                return

            try:
                data: Any = json.loads(msg)
            except ValueError:
                log.debug("ws: ignoring non-JSON frame")
                continue

            if not isinstance(data, dict) or "id" not in data:
                continue
            rid = data.get("id")
            try:
                fut = self._pending.get(int(rid))
            except (TypeError, ValueError):
                fut = None
            if fut is not None and not fut.done():
                fut.set_result(data)


__all__ = ["WsTransport"]
