import json

import httpx
import pytest

from grug_sdk.errors import JsonRpcCode, RpcError
from grug_sdk.rpc import HttpTransport, WsTransport, connect_transport
from grug_sdk.utils.bytes import encode_base64

URL = "http://node.test:26657"


class Recorder:
    """httpx.MockTransport handler replaying a scripted list of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.bodies = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(json.loads(request.content))
        status, payload = self.responses.pop(0)
        if isinstance(payload, dict) and "result" in payload:
            payload = {"jsonrpc": "2.0", "id": self.bodies[-1]["id"], **payload}
        return httpx.Response(status, json=payload)


def _transport(rec: Recorder, **kw) -> HttpTransport:
    return HttpTransport(URL, transport=httpx.MockTransport(rec), backoff_base=0, backoff_jitter=0, **kw)


ABCI_OK = {"result": {"response": {"code": 0, "value": encode_base64(b"v"), "height": "12"}}}


@pytest.mark.asyncio
async def test_abci_query_encodes_params_and_decodes_value():
    rec = Recorder((200, ABCI_OK))
    rpc = _transport(rec)
    res = await rpc.abci_query("/store", b"\x01\x02", 12, True)
    await rpc.close()
    assert res.value == b"v"
    assert res.height == 12
    (body,) = rec.bodies
    assert body["method"] == "abci_query"
    assert body["params"] == {"path": "/store", "data": "0102", "height": "12", "prove": True}


@pytest.mark.asyncio
async def test_reads_are_retried_on_transient_status():
    rec = Recorder((503, {}), (429, {}), (200, ABCI_OK))
    rpc = _transport(rec)
    res = await rpc.abci_query("/app", b"{}")
    await rpc.close()
    assert res.value == b"v"
    assert len(rec.bodies) == 3


@pytest.mark.asyncio
async def test_reads_give_up_after_max_retries():
    rec = Recorder(*[(502, {})] * 3)
    rpc = _transport(rec, max_retries=2)
    with pytest.raises(RpcError) as ei:
        await rpc.status()
    await rpc.close()
    assert ei.value.code == JsonRpcCode.TRANSPORT_FAILED
    assert len(rec.bodies) == 3


@pytest.mark.asyncio
async def test_broadcast_is_sent_once():
    rec = Recorder((503, {}), (200, {"result": {"code": 0, "hash": "AB"}}))
    rpc = _transport(rec)
    with pytest.raises(RpcError):
        await rpc.broadcast_tx_sync(b"tx")
    await rpc.close()
    assert len(rec.bodies) == 1
    assert rec.bodies[0]["params"] == {"tx": encode_base64(b"tx")}


@pytest.mark.asyncio
async def test_broadcast_response_decoded():
    rec = Recorder((200, {"result": {"code": 4, "hash": "AB", "codespace": "sdk", "log": "unauthorized"}}))
    rpc = _transport(rec)
    res = await rpc.broadcast_tx_sync(b"tx")
    await rpc.close()
    assert (res.code, res.hash, res.codespace, res.log) == (4, "AB", "sdk", "unauthorized")


@pytest.mark.asyncio
async def test_jsonrpc_error_is_not_retried():
    rec = Recorder((200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad params", "data": "x"}}))
    rpc = _transport(rec)
    with pytest.raises(RpcError) as ei:
        await rpc.abci_query("/app", b"{}")
    await rpc.close()
    assert ei.value.code == JsonRpcCode.INVALID_PARAMS
    assert ei.value.method == "abci_query"
    assert len(rec.bodies) == 1


@pytest.mark.asyncio
async def test_tx_lookup_sends_base64_hash():
    rec = Recorder((200, {"result": {"hash": "ABCD"}}))
    rpc = _transport(rec)
    await rpc.tx("ABCD")
    await rpc.close()
    assert rec.bodies[0]["params"] == {"hash": encode_base64(bytes.fromhex("ABCD")), "prove": False}


def test_connect_transport_by_scheme():
    assert isinstance(connect_transport("http://localhost:26657"), HttpTransport)
    assert isinstance(connect_transport("wss://node.example/websocket"), WsTransport)
    with pytest.raises(ValueError):
        connect_transport("ftp://node.example")


def test_id_counter_is_not_a_constructor_argument():
    with pytest.raises(TypeError):
        HttpTransport(URL, _id_counter=iter([1]))
