"""
grug_sdk.connect.connectors.base
================================

The capability set every wallet backend implements. The connection manager
only ever talks to this interface, so new backends plug in by subclassing
:class:`Connector`; nothing in the state machine special-cases a type.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional, Sequence

from ...types.core import Message, Tx


class Connector(ABC):
    """
    A wallet backend.

    ``id`` names the backend ("metamask", "passkey", ...) and is what
    persisted sessions refer to. ``uid`` is unique per instance and is the key
    the connection manager indexes connections by.
    """

    type: ClassVar[str] = ""

    def __init__(self, *, id: str, name: str, icon: Optional[str] = None) -> None:
        self.id = id
        self.name = name
        self.icon = icon
        self.uid = f"{self.type}:{id}:{secrets.token_hex(4)}"
        self.chain_id: Optional[str] = None
        self.username: Optional[str] = None
        self.accounts: List[str] = []

    @property
    def is_connected(self) -> bool:
        return self.chain_id is not None

    def _connected(self, chain_id: str, username: str, accounts: Sequence[str]) -> List[str]:
        self.chain_id = chain_id
        self.username = username
        self.accounts = list(accounts)
        return list(self.accounts)

    def _disconnected(self) -> None:
        self.chain_id = None
        self.username = None
        self.accounts = []

    @abstractmethod
    async def connect(self, chain_id: str, username: str) -> List[str]:
        """Open a session on *chain_id* for *username*; returns the accounts it controls."""

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    async def get_accounts(self) -> List[str]:
        return list(self.accounts)

    @abstractmethod
    async def sign_tx(self, msgs: Sequence[Message], sender: str, chain_id: str, sequence: int) -> Tx:
        ...

    async def create_and_sign_tx(self, msgs: Sequence[Message], sender: str, chain_id: str, sequence: int) -> Tx:
        # Lets a connector stand in for a SigningKey in SigningOptions.
        return await self.sign_tx(msgs, sender, chain_id, sequence)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uid={self.uid!r}, name={self.name!r})"


__all__ = ["Connector"]
