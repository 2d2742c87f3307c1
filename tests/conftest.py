from typing import Any, Callable, Dict, List, Optional

import pytest

from grug_sdk.rpc.base import AbciQueryResponse, BroadcastResponse, ProofOp
from grug_sdk.utils.bytes import encode_base64
from grug_sdk.utils.serde import deserialize, serialize

SENDER = "0x" + "ab" * 32
CHAIN_ID = "dev-1"


class FakeTransport:
    """
    In-memory Transport. `/app` queries are answered by tag from `app`
    (tag -> response wire object, or a callable taking the request body);
    `/store` reads come from `store`. Every call is recorded in `calls`.
    """

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.app: Dict[str, Any] = {}
        self.store: Dict[bytes, bytes] = {}
        self.proof_ops: List[ProofOp] = []
        self.error: Optional[AbciQueryResponse] = None
        self.broadcasts: List[bytes] = []
        self.broadcast_result = BroadcastResponse(code=0, hash="ABCDEF")
        self.closed = False

    def app_queries(self) -> List[dict]:
        return [deserialize(c[2]) for c in self.calls if c[0] == "abci_query" and c[1] == "/app"]

    async def abci_query(self, path: str, data: bytes, height: int = 0, prove: bool = False) -> AbciQueryResponse:
        self.calls.append(("abci_query", path, data, height, prove))
        if self.error is not None:
            return self.error
        if path == "/store":
            return AbciQueryResponse(code=0, value=self.store.get(data), height=height, proof_ops=list(self.proof_ops))
        ((tag, body),) = deserialize(data).items()
        answer = self.app[tag]
        if callable(answer):
            answer = answer(body)
        return AbciQueryResponse(code=0, value=serialize(answer), height=height)

    async def broadcast_tx_sync(self, tx: bytes) -> BroadcastResponse:
        self.calls.append(("broadcast_tx_sync", tx))
        self.broadcasts.append(tx)
        return self.broadcast_result

    async def request(self, method: str, params=None):
        self.calls.append((method, params))
        return {}

    async def status(self):
        return await self.request("status")

    async def tx(self, tx_hash: str, prove: bool = False):
        return await self.request("tx", {"hash": tx_hash})

    async def block(self, height=None):
        return await self.request("block", {"height": height})

    async def block_results(self, height=None):
        return await self.request("block_results", {"height": height})

    async def close(self) -> None:
        self.closed = True


def smart_state(sequence: int) -> Callable[[dict], dict]:
    def answer(body: dict) -> dict:
        return {"wasm_smart": {"contract": body["contract"], "data": encode_base64(serialize({"sequence": sequence}))}}

    return answer


@pytest.fixture
def transport() -> FakeTransport:
    t = FakeTransport()
    t.app["info"] = {"info": {"chain_id": CHAIN_ID, "config": {}}}
    t.app["wasm_smart"] = smart_state(7)
    return t
