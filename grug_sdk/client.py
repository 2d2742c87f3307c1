"""
grug_sdk.client
===============

`Client` is the query engine and transaction builder for a grug chain. It
talks to a CometBFT RPC endpoint through any :class:`grug_sdk.rpc.Transport`.

Queries
-------
- ``query(path, data, height, prove)``: raw ABCI query. A non-zero code raises
  :class:`QueryFailed` with the node's codespace/code/log; never retried.
- ``query_store(key, ...)``: raw storage read on ``/store``; with
  ``prove=True`` the proof envelope is checked before it is decoded.
- ``query_app(req, ...)``: typed application query on ``/app``.
- ``query_info``, ``query_balance``, ... : one wrapper per request variant;
  an answer of any other variant raises :class:`UnexpectedResponseShape`.

Transactions
------------
``send_tx(msgs, sign_opts)`` resolves the chain id, then the sender's
sequence, signs the sign-bytes, and broadcasts synchronously, strictly in that
order. The higher-level ops (``transfer``, ``instantiate``, ...) build one
message (two for ``store_code_and_instantiate``) and delegate to it.

Example
-------
    import asyncio
    from grug_sdk import Client, SigningOptions, Secp256k1SigningKey

    async def main():
        async with Client.connect("http://127.0.0.1:26657") as client:
            info = await client.query_info()
            key = Secp256k1SigningKey.from_bytes(secret)
            opts = SigningOptions(sender="0x...", signing_key=key)
            tx_hash = await client.transfer("0x...", {"uatom": 100}, opts)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

from .address import compute_code_hash, derive_address
from .config import SDKConfig
from .errors import BroadcastFailed, QueryFailed, RpcError, UnexpectedResponseShape
from .light_client.verify import (
    MembershipProof,
    NonMembershipProof,
    Proof,
    check_proof_ops,
    verify_membership,
    verify_non_membership,
)
from .rpc import Transport, connect_transport
from .rpc.base import JSON, AbciQueryResponse
from .tx import build
from .tx.build import Admin, CoinsLike, SigningOptions
from .tx.encode import encode_tx
from .types.core import (
    AccountResponse,
    Config,
    InfoResponse,
    Message,
    QueryAccount,
    QueryAccounts,
    QueryBalance,
    QueryBalances,
    QueryCode,
    QueryCodes,
    QueryInfo,
    QueryRequest,
    QueryResponse,
    QuerySupplies,
    QuerySupply,
    QueryWasmRaw,
    QueryWasmSmart,
    Tx,
)
from .utils.bytes import encode_hex
from .utils.serde import deserialize, serialize

log = logging.getLogger(__name__)

STORE_PATH = "/store"
APP_PATH = "/app"

R = TypeVar("R", bound=QueryResponse)

# Called with the signed tx before broadcast; returning False cancels it.
ConfirmFn = Callable[[Tx], Union[bool, Awaitable[bool]]]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Client:
    def __init__(self, transport: Transport, *, chain_id: Optional[str] = None) -> None:
        self.transport = transport
        # Default chain id for signing; None means "ask the chain".
        self.chain_id = chain_id

    # --- construction / lifecycle ----------------------------------------

    @classmethod
    def connect(cls, url: str, *, chain_id: Optional[str] = None, **transport_kwargs: Any) -> "Client":
        return cls(connect_transport(url, **transport_kwargs), chain_id=chain_id)

    @classmethod
    def from_config(cls, cfg: Optional[SDKConfig] = None) -> "Client":
        cfg = cfg or SDKConfig.from_env()
        kwargs: Dict[str, Any] = {"headers": {"User-Agent": cfg.user_agent}}
        if cfg.rpc_url.lower().startswith(("http://", "https://")):
            kwargs.update(
                headers=cfg.http_headers(),
                timeout=cfg.request_timeout,
                max_retries=cfg.max_retries,
                backoff_base=cfg.backoff_base,
            )
        else:
            kwargs.update(request_timeout=cfg.request_timeout)
        return cls(connect_transport(cfg.rpc_url, **kwargs), chain_id=cfg.chain_id)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    # --- generic queries -------------------------------------------------

    async def query(self, path: str, data: bytes, height: int = 0, prove: bool = False) -> AbciQueryResponse:
        res = await self.transport.abci_query(path, data, height, prove)
        if res.code != 0:
            raise QueryFailed(codespace=res.codespace, code=res.code, log=res.log, path=path)
        return res

    async def query_store(
        self, key: bytes, height: int = 0, prove: bool = False
    ) -> Tuple[Optional[bytes], Optional[Proof]]:
        key = bytes(key)
        res = await self.query(STORE_PATH, key, height, prove)
        proof = check_proof_ops(res.proof_ops, key) if prove else None
        # Nodes report an absent key as an empty value.
        return res.value or None, proof

    async def query_and_verify_store(self, key: bytes, root_hash: bytes, height: int = 0) -> Optional[bytes]:
        """Proven store read checked against a trusted *root_hash*. Returns the value, or None if absent."""
        value, proof = await self.query_store(key, height, prove=True)
        if value is not None:
            if not isinstance(proof, MembershipProof):
                raise UnexpectedResponseShape(expected="membership proof", got=proof)
            verify_membership(root_hash, key, value, proof)
        else:
            if not isinstance(proof, NonMembershipProof):
                raise UnexpectedResponseShape(expected="non-membership proof", got=proof)
            verify_non_membership(root_hash, key, proof)
        return value

    async def query_app(self, req: QueryRequest, height: int = 0) -> QueryResponse:
        res = await self.query(APP_PATH, serialize(req), height, False)
        if res.value is None:
            raise UnexpectedResponseShape(expected=f"{req.TAG} query response", got=None)
        return QueryResponse.from_wire(deserialize(res.value))

    async def _query_expect(self, req: QueryRequest, height: int) -> Any:
        res = await self.query_app(req, height)
        return self._expect(res, req.RESPONSE).value

    @staticmethod
    def _expect(res: QueryResponse, variant: Type[R]) -> R:
        if not isinstance(res, variant):
            raise UnexpectedResponseShape(expected=variant.TAG, got=res.TAG)
        return res

    # --- typed queries ---------------------------------------------------

    async def query_info(self, height: int = 0) -> InfoResponse:
        return await self._query_expect(QueryInfo(), height)

    async def query_balance(self, address: str, denom: str, height: int = 0) -> int:
        coin = await self._query_expect(QueryBalance(address, denom), height)
        return coin.amount_int

    async def query_balances(
        self, address: str, start_after: Optional[str] = None, limit: Optional[int] = None, height: int = 0
    ) -> Dict[str, int]:
        coins = await self._query_expect(QueryBalances(address, start_after, limit), height)
        return {c.denom: c.amount_int for c in coins}

    async def query_supply(self, denom: str, height: int = 0) -> int:
        coin = await self._query_expect(QuerySupply(denom), height)
        return coin.amount_int

    async def query_supplies(
        self, start_after: Optional[str] = None, limit: Optional[int] = None, height: int = 0
    ) -> Dict[str, int]:
        coins = await self._query_expect(QuerySupplies(start_after, limit), height)
        return {c.denom: c.amount_int for c in coins}

    async def query_code(self, code_hash: Union[bytes, str], height: int = 0) -> bytes:
        h = code_hash if isinstance(code_hash, str) else encode_hex(code_hash)
        return await self._query_expect(QueryCode(h), height)

    async def query_codes(
        self, start_after: Optional[bytes] = None, limit: Optional[int] = None, height: int = 0
    ) -> List[bytes]:
        cursor = encode_hex(start_after) if start_after is not None else None
        return list(await self._query_expect(QueryCodes(cursor, limit), height))

    async def query_account(self, address: str, height: int = 0) -> AccountResponse:
        return await self._query_expect(QueryAccount(address), height)

    async def query_accounts(
        self, start_after: Optional[str] = None, limit: Optional[int] = None, height: int = 0
    ) -> List[AccountResponse]:
        return list(await self._query_expect(QueryAccounts(start_after, limit), height))

    async def query_wasm_raw(self, contract: str, key: bytes, height: int = 0) -> Optional[bytes]:
        res = await self._query_expect(QueryWasmRaw(contract, bytes(key)), height)
        return res.value

    async def query_wasm_smart(self, contract: str, msg: Any, height: int = 0) -> Any:
        res = await self._query_expect(QueryWasmSmart(contract, msg), height)
        return res.decode()

    # --- chain passthroughs ----------------------------------------------

    async def status(self) -> JSON:
        return await self.transport.status()

    async def tx(self, tx_hash: str, prove: bool = False) -> JSON:
        return await self.transport.tx(tx_hash, prove)

    async def block(self, height: Optional[int] = None) -> JSON:
        return await self.transport.block(height)

    async def block_results(self, height: Optional[int] = None) -> JSON:
        return await self.transport.block_results(height)

    async def wait_for_tx(
        self,
        tx_hash: str,
        *,
        timeout_s: float = 30.0,
        poll_interval_s: float = 0.5,
        max_interval_s: float = 2.5,
        backoff: float = 1.25,
    ) -> JSON:
        """
        Poll the ``tx`` endpoint until *tx_hash* is included in a block.

        Raises:
            TimeoutError on timeout
            RpcError on any error other than "not found"
        """
        deadline = time.monotonic() + float(timeout_s)
        interval = float(poll_interval_s)
        while True:
            try:
                return await self.tx(tx_hash)
            except RpcError as e:
                if "not found" not in f"{e.message} {e.data or ''}".lower():
                    raise
            if time.monotonic() >= deadline:
                raise TimeoutError(f"timeout waiting for tx (tx={tx_hash}, timeout_s={timeout_s})")
            await asyncio.sleep(interval)
            interval = min(interval * float(backoff), float(max_interval_s))

    # --- transactions ----------------------------------------------------

    async def _resolve(self, sign_opts: SigningOptions) -> Tuple[str, int]:
        chain_id = sign_opts.chain_id if sign_opts.chain_id is not None else self.chain_id
        if chain_id is None:
            chain_id = (await self.query_info()).chain_id
            log.debug("client: resolved chain_id=%s from chain", chain_id)
        sequence = sign_opts.sequence
        if sequence is None:
            state = await self.query_wasm_smart(sign_opts.sender, {"state": {}})
            sequence = int(state["sequence"])
            log.debug("client: resolved sequence=%d for sender=%s", sequence, sign_opts.sender)
        return chain_id, sequence

    async def send_tx(
        self,
        msgs: Sequence[Message],
        sign_opts: SigningOptions,
        confirm: Optional[ConfirmFn] = None,
    ) -> Optional[str]:
        """
        Sign and broadcast *msgs*; return the tx hash (hex).

        With *confirm*, the signed tx is shown to it first and nothing is
        broadcast (None is returned) unless it answers True.
        """
        chain_id, sequence = await self._resolve(sign_opts)
        tx = await _maybe_await(
            sign_opts.signing_key.create_and_sign_tx(list(msgs), sign_opts.sender, chain_id, sequence)
        )
        if confirm is not None and not await _maybe_await(confirm(tx)):
            log.info("client: tx from %s not confirmed; not broadcasting", sign_opts.sender)
            return None
        res = await self.transport.broadcast_tx_sync(encode_tx(tx))
        if res.code != 0:
            raise BroadcastFailed(codespace=res.codespace, code=res.code, log=res.log, tx_hash=res.hash or None)
        log.info("client: broadcast tx=%s sender=%s sequence=%d", res.hash, sign_opts.sender, sequence)
        return res.hash

    async def update_config(self, new_cfg: Config, sign_opts: SigningOptions) -> Optional[str]:
        return await self.send_tx([build.update_config(new_cfg)], sign_opts)

    async def transfer(self, to: str, coins: CoinsLike, sign_opts: SigningOptions) -> Optional[str]:
        return await self.send_tx([build.transfer(to, coins)], sign_opts)

    async def store_code(self, wasm_byte_code: bytes, sign_opts: SigningOptions) -> Optional[str]:
        return await self.send_tx([build.store_code(wasm_byte_code)], sign_opts)

    async def instantiate(
        self,
        code_hash: bytes,
        msg: Any,
        salt: bytes,
        sign_opts: SigningOptions,
        *,
        funds: CoinsLike = None,
        admin: Admin = None,
    ) -> Tuple[str, Optional[str]]:
        """Returns ``(address, tx_hash)``; the address is derived locally and matches the chain's."""
        address = derive_address(sign_opts.sender, code_hash, salt)
        msg_ = build.instantiate(sign_opts.sender, code_hash, msg, salt, funds=funds, admin=admin)
        return address, await self.send_tx([msg_], sign_opts)

    async def store_code_and_instantiate(
        self,
        wasm_byte_code: bytes,
        msg: Any,
        salt: bytes,
        sign_opts: SigningOptions,
        *,
        funds: CoinsLike = None,
        admin: Admin = None,
    ) -> Tuple[bytes, str, Optional[str]]:
        """Upload and instantiate in one tx. Returns ``(code_hash, address, tx_hash)``."""
        code_hash = compute_code_hash(wasm_byte_code)
        address = derive_address(sign_opts.sender, code_hash, salt)
        msgs = [
            build.store_code(wasm_byte_code),
            build.instantiate(sign_opts.sender, code_hash, msg, salt, funds=funds, admin=admin),
        ]
        return code_hash, address, await self.send_tx(msgs, sign_opts)

    async def execute(
        self, contract: str, msg: Any, sign_opts: SigningOptions, *, funds: CoinsLike = None
    ) -> Optional[str]:
        return await self.send_tx([build.execute(contract, msg, funds=funds)], sign_opts)

    async def migrate(
        self, contract: str, new_code_hash: bytes, msg: Any, sign_opts: SigningOptions
    ) -> Optional[str]:
        return await self.send_tx([build.migrate(contract, new_code_hash, msg)], sign_opts)


__all__ = ["Client", "ConfirmFn", "STORE_PATH", "APP_PATH"]
