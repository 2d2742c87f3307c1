"""
grug_sdk.connect
================

Wallet connections across chains and connector backends.

    from grug_sdk.connect import ConnectionManager, FileStorage, injected

    manager = ConnectionManager([injected(id="metamask", host=host)], storage=FileStorage("session.json"))
    await manager.connect("metamask", "local-1", "alice")
    ...
    await manager.reconnect()   # after a restart
"""

from __future__ import annotations

from .connectors import (
    Connector,
    CredentialDeclined,
    CredentialProvider,
    InjectedConnector,
    PasskeyAssertion,
    PasskeyConnector,
    injected,
    passkey,
)
from .manager import ConnectionManager
from .state import Connection, ConnectionState, ConnectionStatus
from .storage import FileStorage, MemoryStorage, SessionStorage

__all__ = [
    "Connector",
    "InjectedConnector",
    "PasskeyConnector",
    "PasskeyAssertion",
    "CredentialProvider",
    "CredentialDeclined",
    "injected",
    "passkey",
    "ConnectionManager",
    "Connection",
    "ConnectionState",
    "ConnectionStatus",
    "SessionStorage",
    "MemoryStorage",
    "FileStorage",
]
