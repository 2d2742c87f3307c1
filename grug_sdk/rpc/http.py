from __future__ import annotations

"""
HTTP JSON-RPC transport (async) for CometBFT-style endpoints.

- Uses httpx.AsyncClient.
- Retries read-only RPC calls (abci_query, status, tx, block, ...) on transient
  transport failures and 429/502/503/504; `broadcast_tx_sync` is sent once so
  a timed-out broadcast is never duplicated.
- JSON-RPC error objects surface as RpcError and are never retried.

Example:
    from grug_sdk.rpc.http import HttpTransport

    async with HttpTransport("http://127.0.0.1:26657") as rpc:
        res = await rpc.abci_query("/app", b'{"info":{}}')
"""

import asyncio
import json
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

import httpx

from ..errors import JsonRpcCode, RpcError
from ..version import __version__ as SDK_VERSION
from .base import JSON, READ_METHODS, JsonRpcTransport, Params, extract_result, id_counter, make_payload

log = logging.getLogger(__name__)


def _is_retriable_http(status: int) -> bool:
    # Typical transient HTTP statuses: 429/502/503/504
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    # Exponential backoff with jitter in [0, jitter]
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


class _Transient(Exception):
    """Internal marker for a failure worth another attempt."""


@dataclass
class HttpTransport(JsonRpcTransport):
    """Asynchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.15
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.2
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.AsyncBaseTransport] = None  # injectable for tests (httpx.MockTransport)
    _id_counter: Iterator[int] = field(init=False, default_factory=id_counter)
    _client: Optional[httpx.AsyncClient] = field(init=False, default=None)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"grug-sdk-py/{SDK_VERSION}",
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- public API ------------------------------------------------------

    async def request(self, method: str, params: Params = None) -> JSON:
        """Perform a single JSON-RPC request and return `result` or raise RpcError."""
        payload = make_payload(method, params, next(self._id_counter))
        retries = self.max_retries if method in READ_METHODS else 0
        last_exc: Optional[Exception] = None
        for attempt in range(1, retries + 2):  # N retries -> N+1 attempts
            log.debug("rpc: -> %s id=%s attempt=%d", method, payload["id"], attempt)
            try:
                return await self._send_once(method, payload)
            except _Transient as e:
                last_exc = e
                if attempt > retries:
                    break
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                log.warning("rpc: %s failed (%s); retrying in %.2fs", method, e, delay)
                await asyncio.sleep(delay)
        raise RpcError(
            method=method,
            code=JsonRpcCode.TRANSPORT_FAILED,
            message="RPC transport failed",
            data=str(last_exc),
        )

    # --- internals -------------------------------------------------------

    async def _send_once(self, method: str, payload: Dict[str, Any]) -> JSON:
        if self._client is None:
            raise RpcError(method=method, code=JsonRpcCode.TRANSPORT_FAILED, message="transport is closed")
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = await self._client.post(self.url, content=body)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise _Transient(f"network error: {e}") from e
        if _is_retriable_http(r.status_code):
            raise _Transient(f"HTTP {r.status_code}")
        # Avoid raise_for_status() to keep the error body visible below
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Non-JSON response from RPC",
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                http_status=r.status_code,
            ) from e
        return extract_result(resp, method=method, http_status=r.status_code)


__all__ = ["HttpTransport"]
