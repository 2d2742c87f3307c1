import pytest

from conftest import CHAIN_ID, SENDER, FakeTransport

from grug_sdk.address import compute_code_hash, derive_address
from grug_sdk.client import Client
from grug_sdk.errors import BroadcastFailed
from grug_sdk.rpc.base import BroadcastResponse
from grug_sdk.tx.build import AdminOption, SigningOptions
from grug_sdk.tx.encode import create_sign_bytes, decode_tx
from grug_sdk.types.core import Coin, Instantiate, StoreCode, Transfer
from grug_sdk.wallet.signer import Secp256k1SigningKey, verify_signature

KEY = Secp256k1SigningKey.from_bytes(bytes(range(1, 33)))
ALICE = "0x" + "a1" * 32


def _opts(**kw) -> SigningOptions:
    return SigningOptions(sender=SENDER, signing_key=KEY, **kw)


def _signed_tx(transport: FakeTransport):
    assert len(transport.broadcasts) == 1
    return decode_tx(transport.broadcasts[0])


@pytest.mark.asyncio
async def test_unset_sequence_costs_one_state_query(transport: FakeTransport):
    tx_hash = await Client(transport).transfer(ALICE, {"uatom": 5}, _opts(chain_id=CHAIN_ID))
    assert tx_hash == "ABCDEF"
    # exactly one lookup, to the sender's own contract state
    assert len(transport.app_queries()) == 1
    (query,) = transport.app_queries()
    assert query["wasm_smart"]["contract"] == SENDER

    tx = _signed_tx(transport)
    assert tx.sender == SENDER
    assert tx.msgs == (Transfer(to=ALICE, coins=(Coin("uatom", "5"),)),)
    sign_bytes = create_sign_bytes(tx.msgs, SENDER, CHAIN_ID, 7)
    assert verify_signature(KEY.public_key_bytes(), sign_bytes, tx.credential)
    assert not verify_signature(KEY.public_key_bytes(), create_sign_bytes(tx.msgs, SENDER, CHAIN_ID, 8), tx.credential)


@pytest.mark.asyncio
async def test_sequence_zero_is_not_looked_up(transport: FakeTransport):
    await Client(transport).transfer(ALICE, {"uatom": 1}, _opts(chain_id=CHAIN_ID, sequence=0))
    assert transport.app_queries() == []
    tx = _signed_tx(transport)
    assert verify_signature(KEY.public_key_bytes(), create_sign_bytes(tx.msgs, SENDER, CHAIN_ID, 0), tx.credential)


@pytest.mark.asyncio
async def test_chain_id_resolution_order(transport: FakeTransport):
    # explicit option wins over client default and chain
    await Client(transport, chain_id="default-1").transfer(ALICE, {"uatom": 1}, _opts(chain_id="opt-1", sequence=1))
    tx = _signed_tx(transport)
    assert verify_signature(KEY.public_key_bytes(), create_sign_bytes(tx.msgs, SENDER, "opt-1", 1), tx.credential)
    assert transport.app_queries() == []

    # then the client default, still without touching the chain
    transport.broadcasts.clear()
    await Client(transport, chain_id="default-1").transfer(ALICE, {"uatom": 1}, _opts(sequence=1))
    tx = _signed_tx(transport)
    assert verify_signature(KEY.public_key_bytes(), create_sign_bytes(tx.msgs, SENDER, "default-1", 1), tx.credential)
    assert transport.app_queries() == []

    # finally the chain itself, queried before the sequence
    transport.broadcasts.clear()
    await Client(transport).transfer(ALICE, {"uatom": 1}, _opts())
    assert [list(q) for q in transport.app_queries()] == [["info"], ["wasm_smart"]]
    tx = _signed_tx(transport)
    assert verify_signature(KEY.public_key_bytes(), create_sign_bytes(tx.msgs, SENDER, CHAIN_ID, 7), tx.credential)


@pytest.mark.asyncio
async def test_broadcast_failure_surfaces_check_tx_error(transport: FakeTransport):
    transport.broadcast_result = BroadcastResponse(code=11, hash="FF00", codespace="sdk", log="out of gas")
    with pytest.raises(BroadcastFailed) as ei:
        await Client(transport).transfer(ALICE, {"uatom": 1}, _opts(chain_id=CHAIN_ID, sequence=2))
    err = ei.value
    assert (err.codespace, err.code, err.log, err.tx_hash) == ("sdk", 11, "out of gas", "FF00")


@pytest.mark.asyncio
async def test_declined_confirmation_never_broadcasts(transport: FakeTransport):
    seen = []

    async def confirm(tx):
        seen.append(tx)
        return False

    client = Client(transport)
    res = await client.send_tx([Transfer(to=ALICE, coins=())], _opts(chain_id=CHAIN_ID, sequence=1), confirm=confirm)
    assert res is None
    assert len(seen) == 1
    assert transport.broadcasts == []

    res = await client.send_tx([Transfer(to=ALICE, coins=())], _opts(chain_id=CHAIN_ID, sequence=1), confirm=lambda tx: True)
    assert res == "ABCDEF"


@pytest.mark.asyncio
async def test_instantiate_self_admin_is_derived_address(transport: FakeTransport):
    code_hash = compute_code_hash(b"\x00asm")
    address, tx_hash = await Client(transport).instantiate(
        code_hash, {"config": {}}, b"salt", _opts(chain_id=CHAIN_ID, sequence=1), admin=AdminOption.SELF
    )
    assert address == derive_address(SENDER, code_hash, b"salt")
    assert tx_hash == "ABCDEF"
    (msg,) = _signed_tx(transport).msgs
    assert isinstance(msg, Instantiate)
    assert msg.admin == address
    assert msg.msg == {"config": {}}


@pytest.mark.asyncio
@pytest.mark.parametrize("admin", [None, AdminOption.NONE, "none"])
async def test_instantiate_without_admin(transport: FakeTransport, admin):
    await Client(transport).instantiate(
        b"\x01" * 32, {}, b"s", _opts(chain_id=CHAIN_ID, sequence=1), admin=admin
    )
    (msg,) = _signed_tx(transport).msgs
    assert msg.admin is None


@pytest.mark.asyncio
async def test_store_code_and_instantiate_in_one_tx(transport: FakeTransport):
    wasm = b"\x00asm\x01\x00\x00\x00"
    code_hash, address, tx_hash = await Client(transport).store_code_and_instantiate(
        wasm, {"x": 1}, b"salt", _opts(chain_id=CHAIN_ID, sequence=4), funds={"uatom": 9}, admin=ALICE
    )
    assert code_hash == compute_code_hash(wasm)
    assert address == derive_address(SENDER, code_hash, b"salt")
    store, inst = _signed_tx(transport).msgs
    assert store == StoreCode(wasm_byte_code=wasm)
    assert inst.code_hash == code_hash
    assert inst.funds == (Coin("uatom", "9"),)
    assert inst.admin == ALICE


@pytest.mark.asyncio
async def test_execute_and_migrate_build_one_message(transport: FakeTransport):
    client = Client(transport)
    await client.execute(ALICE, {"inc": {}}, _opts(chain_id=CHAIN_ID, sequence=1), funds=[Coin("uatom", "2")])
    (msg,) = _signed_tx(transport).msgs
    assert msg.to_wire()["execute"]["funds"] == [{"denom": "uatom", "amount": "2"}]

    transport.broadcasts.clear()
    await client.migrate(ALICE, b"\x02" * 32, {}, _opts(chain_id=CHAIN_ID, sequence=2))
    (msg,) = _signed_tx(transport).msgs
    assert msg.to_wire()["migrate"]["new_code_hash"] == "02" * 32
