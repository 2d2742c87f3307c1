import pytest

from conftest import SENDER, FakeTransport

from grug_sdk.client import Client
from grug_sdk.errors import ProofValidationError, QueryFailed, RpcError, UnexpectedResponseShape
from grug_sdk.light_client.verify import (
    PROOF_OP_TYPE,
    MembershipProof,
    NonMembershipProof,
    ProofNode,
    hash_leaf_node,
)
from grug_sdk.rpc.base import AbciQueryResponse, ProofOp
from grug_sdk.types.core import AccountResponse, InfoResponse
from grug_sdk.utils.bytes import encode_base64
from grug_sdk.utils.hash import sha256
from grug_sdk.utils.serde import serialize

CONTRACT = "0x" + "cc" * 32


@pytest.mark.asyncio
async def test_non_zero_code_raises_query_failed(transport: FakeTransport):
    transport.error = AbciQueryResponse(code=5, codespace="bank", log="insufficient funds")
    client = Client(transport)
    with pytest.raises(QueryFailed) as ei:
        await client.query_info()
    err = ei.value
    assert (err.codespace, err.code, err.log) == ("bank", 5, "insufficient funds")
    assert "codespace: bank" in str(err)
    # never retried
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_query_info(transport: FakeTransport):
    info = await Client(transport).query_info()
    assert isinstance(info, InfoResponse)
    assert info.chain_id == "dev-1"
    assert transport.app_queries() == [{"info": {}}]


@pytest.mark.asyncio
async def test_wrapper_rejects_other_variant(transport: FakeTransport):
    transport.app["balance"] = {"supply": {"denom": "uatom", "amount": "1"}}
    with pytest.raises(UnexpectedResponseShape) as ei:
        await Client(transport).query_balance(SENDER, "uatom")
    assert ei.value.expected == "balance"
    assert ei.value.got == "supply"


@pytest.mark.asyncio
async def test_balances_and_pagination(transport: FakeTransport):
    transport.app["balances"] = {"balances": [{"denom": "uatom", "amount": "10"}, {"denom": "uosmo", "amount": "2"}]}
    client = Client(transport)
    assert await client.query_balances(SENDER) == {"uatom": 10, "uosmo": 2}
    await client.query_balances(SENDER, start_after="uatom", limit=1)
    first, second = transport.app_queries()
    assert first == {"balances": {"address": SENDER}}
    assert second == {"balances": {"address": SENDER, "start_after": "uatom", "limit": 1}}


@pytest.mark.asyncio
async def test_balance_is_big_int(transport: FakeTransport):
    transport.app["balance"] = {"balance": {"denom": "uatom", "amount": str(10**30)}}
    assert await Client(transport).query_balance(SENDER, "uatom") == 10**30


@pytest.mark.asyncio
async def test_query_code_takes_bytes_or_hex(transport: FakeTransport):
    transport.app["code"] = {"code": encode_base64(b"\x00asm")}
    client = Client(transport)
    assert await client.query_code(b"\x01" * 32) == b"\x00asm"
    assert await client.query_code("01" * 32) == b"\x00asm"
    assert [q["code"]["hash"] for q in transport.app_queries()] == ["01" * 32, "01" * 32]


@pytest.mark.asyncio
async def test_query_account_and_accounts(transport: FakeTransport):
    acct = {"address": CONTRACT, "code_hash": "ee" * 32, "admin": CONTRACT}
    transport.app["account"] = {"account": acct}
    transport.app["accounts"] = {"accounts": [acct]}
    client = Client(transport)
    assert await client.query_account(CONTRACT) == AccountResponse(CONTRACT, "ee" * 32, CONTRACT)
    assert await client.query_accounts(limit=10) == [AccountResponse(CONTRACT, "ee" * 32, CONTRACT)]
    assert transport.app_queries()[1] == {"accounts": {"limit": 10}}


@pytest.mark.asyncio
async def test_wasm_raw_absent_and_present(transport: FakeTransport):
    client = Client(transport)
    transport.app["wasm_raw"] = {"wasm_raw": {"contract": CONTRACT, "key": encode_base64(b"k")}}
    assert await client.query_wasm_raw(CONTRACT, b"k") is None
    transport.app["wasm_raw"] = {
        "wasm_raw": {"contract": CONTRACT, "key": encode_base64(b"k"), "value": encode_base64(b"v")}
    }
    assert await client.query_wasm_raw(CONTRACT, b"k") == b"v"


@pytest.mark.asyncio
async def test_wasm_smart_decodes_payload(transport: FakeTransport):
    transport.app["wasm_smart"] = lambda body: {
        "wasm_smart": {"contract": body["contract"], "data": encode_base64(serialize({"count": 3}))}
    }
    assert await Client(transport).query_wasm_smart(CONTRACT, {"count": {}}) == {"count": 3}


@pytest.mark.asyncio
async def test_query_store_without_proof(transport: FakeTransport):
    transport.store[b"k"] = b"v"
    value, proof = await Client(transport).query_store(b"k")
    assert (value, proof) == (b"v", None)
    assert transport.calls[0][1] == "/store"


def _proof_op(key: bytes, type_: str = PROOF_OP_TYPE) -> ProofOp:
    return ProofOp(type=type_, key=key, data=serialize(MembershipProof(sibling_hashes=()).to_wire()))


@pytest.mark.asyncio
async def test_query_store_with_proof(transport: FakeTransport):
    transport.store[b"k"] = b"v"
    transport.proof_ops = [_proof_op(b"k")]
    value, proof = await Client(transport).query_store(b"k", prove=True)
    assert value == b"v"
    assert proof == MembershipProof(sibling_hashes=())
    assert transport.calls[0][4] is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ops",
    [
        [],
        [_proof_op(b"k"), _proof_op(b"k")],
        [_proof_op(b"k", type_="ics23:iavl")],
        [_proof_op(b"not-k")],
    ],
    ids=["no-ops", "two-ops", "wrong-type", "wrong-key"],
)
async def test_query_store_rejects_bad_proof_envelope(transport: FakeTransport, ops):
    transport.store[b"k"] = b"v"
    transport.proof_ops = ops
    with pytest.raises(ProofValidationError):
        await Client(transport).query_store(b"k", prove=True)


@pytest.mark.asyncio
async def test_query_and_verify_store_single_leaf_tree(transport: FakeTransport):
    transport.store[b"k"] = b"v"
    transport.proof_ops = [_proof_op(b"k")]
    root = hash_leaf_node(sha256(b"k"), sha256(b"v"))
    assert await Client(transport).query_and_verify_store(b"k", root) == b"v"
    with pytest.raises(ProofValidationError):
        await Client(transport).query_and_verify_store(b"k", b"\x00" * 32)


@pytest.mark.asyncio
async def test_empty_store_value_reads_as_absent(transport: FakeTransport):
    neighbour = ProofNode.leaf(sha256(b"other"), sha256(b"x"))
    transport.store[b"k"] = b""
    transport.proof_ops = [
        ProofOp(
            type=PROOF_OP_TYPE,
            key=b"k",
            data=serialize(NonMembershipProof(node=neighbour, sibling_hashes=()).to_wire()),
        )
    ]
    client = Client(transport)
    assert await client.query_store(b"k") == (None, None)
    assert await client.query_and_verify_store(b"k", neighbour.hash()) is None


@pytest.mark.asyncio
async def test_wait_for_tx_polls_until_found():
    class Pending(FakeTransport):
        def __init__(self):
            super().__init__()
            self.misses = 2

        async def tx(self, tx_hash, prove=False):
            if self.misses:
                self.misses -= 1
                raise RpcError(method="tx", code=-32603, message="Internal error", data=f"tx ({tx_hash}) not found")
            return {"hash": tx_hash, "height": "9"}

    client = Client(Pending())
    res = await client.wait_for_tx("ABCD", timeout_s=5, poll_interval_s=0.01)
    assert res["height"] == "9"


@pytest.mark.asyncio
async def test_wait_for_tx_times_out():
    class Never(FakeTransport):
        async def tx(self, tx_hash, prove=False):
            raise RpcError(method="tx", code=-32603, message="tx not found")

    with pytest.raises(TimeoutError):
        await Client(Never()).wait_for_tx("ABCD", timeout_s=0.05, poll_interval_s=0.01)


@pytest.mark.asyncio
async def test_client_closes_transport(transport: FakeTransport):
    async with Client(transport):
        pass
    assert transport.closed
