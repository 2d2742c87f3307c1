"""
Connector backed by an injected EIP-1193 style provider.

The provider is looked up in a host environment (a mapping standing in for
the page's ``window``) by a configurable callable; by default ``host["ethereum"]``.
Every wallet call goes through ``provider.request({"method": ..., "params": ...})``,
which may be sync or async.

Connecting asks for controller keys with ``eth_requestAccounts`` and then for the
user's grug accounts on the chain with ``grug_accounts``.

Sign-bytes are signed with ``personal_sign`` by the first controller account.
A provider error carrying code 4001 means the user declined and is raised as
UserRejected.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence

from ...errors import ProviderNotFound, UserRejected
from ...tx.encode import create_sign_bytes
from ...types.core import Message, Tx
from ...utils.bytes import from_hex, to_hex
from .base import Connector

log = logging.getLogger(__name__)

USER_REJECTED_CODE = 4001


class Provider(Protocol):
    def request(self, args: Mapping[str, Any]) -> Any: ...


ProviderLookup = Callable[[Mapping[str, Any]], Optional[Provider]]


def default_lookup(host: Mapping[str, Any]) -> Optional[Provider]:
    return host.get("ethereum")


class InjectedConnector(Connector):
    type = "eip1193"

    def __init__(
        self,
        *,
        id: str = "metamask",
        name: str = "MetaMask",
        icon: Optional[str] = None,
        provider: Optional[ProviderLookup] = None,
        host: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(id=id, name=name, icon=icon)
        self._lookup: ProviderLookup = provider or default_lookup
        self._host: Mapping[str, Any] = host if host is not None else {}
        self.controllers: List[str] = []

    def get_provider(self) -> Provider:
        provider = self._lookup(self._host)
        if provider is None:
            raise ProviderNotFound(self.id)
        return provider

    async def _request(self, method: str, params: Optional[Any] = None) -> Any:
        provider = self.get_provider()
        args: dict = {"method": method}
        if params is not None:
            args["params"] = params
        log.debug("connector %s: -> %s", self.id, method)
        try:
            res = provider.request(args)
            if inspect.isawaitable(res):
                res = await res
        except Exception as e:
            if getattr(e, "code", None) == USER_REJECTED_CODE:
                raise UserRejected(self.id, str(e) or None) from e
            raise
        return res

    async def connect(self, chain_id: str, username: str) -> List[str]:
        self.controllers = list(await self._request("eth_requestAccounts") or [])
        accounts = await self._request("grug_accounts", {"chainId": chain_id, "username": username})
        return self._connected(chain_id, username, accounts or [])

    async def disconnect(self) -> None:
        # EIP-1193 has no disconnect; the session is dropped locally.
        self.controllers = []
        self._disconnected()

    async def get_accounts(self) -> List[str]:
        if self.chain_id is None or self.username is None:
            return []
        accounts = await self._request("grug_accounts", {"chainId": self.chain_id, "username": self.username})
        self.accounts = list(accounts or [])
        return list(self.accounts)

    async def sign_tx(self, msgs: Sequence[Message], sender: str, chain_id: str, sequence: int) -> Tx:
        if not self.controllers:
            self.controllers = list(await self._request("eth_requestAccounts") or [])
        if not self.controllers:
            raise UserRejected(self.id, "no controller account authorised")
        sign_bytes = create_sign_bytes(msgs, sender, chain_id, sequence)
        signature = await self._request("personal_sign", [to_hex(sign_bytes), self.controllers[0]])
        return Tx(sender=sender, msgs=tuple(msgs), credential=from_hex(signature))


__all__ = ["InjectedConnector", "Provider", "ProviderLookup", "default_lookup", "USER_REJECTED_CODE"]
