"""
Connector backed by a platform passkey (WebAuthn-style credential).

Key material never leaves the platform authenticator: the connector only
asks a :class:`CredentialProvider` for assertions. ``connect`` prompts once
to pick the credential; ``sign_tx`` prompts again with the sign-bytes as the
challenge. Either prompt may be declined; that surfaces as UserRejected.

The credential attached to a signed tx is the serialised assertion:

    {"passkey": {"credential_id": b64, "authenticator_data": b64,
                 "client_data": b64, "sig": b64}}
"""

from __future__ import annotations

import inspect
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Protocol, Sequence, Union

from ...errors import UserRejected
from ...tx.encode import create_sign_bytes
from ...types.core import Message, Tx
from ...utils.bytes import encode_base64
from ...utils.serde import serialize
from .base import Connector

log = logging.getLogger(__name__)


class CredentialDeclined(Exception):
    """Raised by credential providers when the user cancels the prompt."""


@dataclass(slots=True, frozen=True)
class PasskeyAssertion:
    credential_id: bytes
    authenticator_data: bytes
    client_data_json: bytes
    signature: bytes

    def to_credential(self) -> bytes:
        return serialize(
            {
                "passkey": {
                    "credential_id": encode_base64(self.credential_id),
                    "authenticator_data": encode_base64(self.authenticator_data),
                    "client_data": encode_base64(self.client_data_json),
                    "sig": encode_base64(self.signature),
                }
            }
        )


class CredentialProvider(Protocol):
    """Platform credential API (``navigator.credentials`` in a browser)."""

    async def create(self, options: Mapping[str, Any]) -> PasskeyAssertion: ...

    async def get(self, options: Mapping[str, Any]) -> PasskeyAssertion: ...


# (chain_id, username, credential_id) -> accounts controlled by that credential
AccountResolver = Callable[[str, str, bytes], Union[List[str], Awaitable[List[str]]]]


def _is_declined(e: BaseException) -> bool:
    return isinstance(e, CredentialDeclined) or getattr(e, "name", None) == "NotAllowedError"


class PasskeyConnector(Connector):
    type = "passkey"

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        id: str = "passkey",
        name: str = "Passkey",
        icon: Optional[str] = None,
        rp_id: Optional[str] = None,
        accounts: Optional[AccountResolver] = None,
    ) -> None:
        super().__init__(id=id, name=name, icon=icon)
        self._credentials = credentials
        self._rp_id = rp_id
        self._resolve_accounts = accounts
        self.credential_id: Optional[bytes] = None

    async def _assert(self, challenge: bytes, allow: Optional[bytes] = None) -> PasskeyAssertion:
        options: dict = {"challenge": challenge, "user_verification": "required"}
        if self._rp_id is not None:
            options["rp_id"] = self._rp_id
        if allow is not None:
            options["allow_credentials"] = [allow]
        log.debug("connector %s: requesting assertion", self.id)
        try:
            return await self._credentials.get(options)
        except Exception as e:
            if _is_declined(e):
                raise UserRejected(self.id, str(e) or None) from e
            raise

    async def connect(self, chain_id: str, username: str) -> List[str]:
        assertion = await self._assert(secrets.token_bytes(32))
        self.credential_id = assertion.credential_id
        accounts: Any = []
        if self._resolve_accounts is not None:
            accounts = self._resolve_accounts(chain_id, username, assertion.credential_id)
            if inspect.isawaitable(accounts):
                accounts = await accounts
        return self._connected(chain_id, username, accounts)

    async def disconnect(self) -> None:
        self.credential_id = None
        self._disconnected()

    async def sign_tx(self, msgs: Sequence[Message], sender: str, chain_id: str, sequence: int) -> Tx:
        sign_bytes = create_sign_bytes(msgs, sender, chain_id, sequence)
        assertion = await self._assert(sign_bytes, allow=self.credential_id)
        return Tx(sender=sender, msgs=tuple(msgs), credential=assertion.to_credential())


__all__ = [
    "PasskeyConnector",
    "PasskeyAssertion",
    "CredentialProvider",
    "CredentialDeclined",
    "AccountResolver",
]
