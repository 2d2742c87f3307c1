"""
Immutable snapshots of the wallet connection state.

`ConnectionState.connections` (connector uid -> Connection) is the only owning
table; the per-chain index `connectors` (chain id -> connector uid) is derived
from it whenever a snapshot is built, so the two can never disagree. Every
transition returns a new snapshot and the manager runs `check()` on it before
publishing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple

from ..errors import InvalidConnectionState
from .connectors.base import Connector


class ConnectionStatus(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


@dataclass(frozen=True)
class Connection:
    chain_id: str
    connector: Connector
    username: str
    accounts: Tuple[str, ...] = ()

    def to_record(self) -> Dict[str, Any]:
        """Minimal persisted form; enough to reconnect after a restart."""
        return {
            "chain_id": self.chain_id,
            "connector_id": self.connector.id,
            "username": self.username,
            "accounts": list(self.accounts),
        }


@dataclass(frozen=True)
class ConnectionState:
    connections: Mapping[str, Connection] = field(default_factory=dict)
    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    connectors: Mapping[str, str] = field(init=False, repr=True)

    def __post_init__(self) -> None:
        conns = dict(self.connections)
        object.__setattr__(self, "connections", MappingProxyType(conns))
        object.__setattr__(
            self, "connectors", MappingProxyType({c.chain_id: uid for uid, c in conns.items()})
        )

    # --- constructors / transitions --------------------------------------

    @classmethod
    def empty(cls) -> "ConnectionState":
        return cls({}, ConnectionStatus.DISCONNECTED)

    @classmethod
    def of(cls, connections: Iterable[Connection], status: "ConnectionStatus | None" = None) -> "ConnectionState":
        conns = {c.connector.uid: c for c in connections}
        if status is None:
            status = ConnectionStatus.CONNECTED if conns else ConnectionStatus.DISCONNECTED
        return cls(conns, status)

    def with_status(self, status: ConnectionStatus) -> "ConnectionState":
        return ConnectionState(self.connections, status)

    def with_connection(self, conn: Connection) -> "ConnectionState":
        """Add *conn*, evicting whatever held its chain or its connector before."""
        uid = conn.connector.uid
        kept = [
            c for u, c in self.connections.items() if u != uid and c.chain_id != conn.chain_id
        ]
        return ConnectionState.of([*kept, conn], ConnectionStatus.CONNECTED)

    def without(self, connector_uid: str) -> "ConnectionState":
        kept = [c for u, c in self.connections.items() if u != connector_uid]
        if not kept:
            return ConnectionState.empty()
        return ConnectionState.of(kept, ConnectionStatus.CONNECTED)

    def settled(self) -> "ConnectionState":
        """Status recomputed from the table: connected iff non-empty."""
        return ConnectionState.of(self.connections.values())

    # --- queries ---------------------------------------------------------

    def connection_for_chain(self, chain_id: str) -> "Connection | None":
        uid = self.connectors.get(chain_id)
        return self.connections.get(uid) if uid is not None else None

    def to_records(self) -> list:
        return [c.to_record() for c in self.connections.values()]

    def check(self) -> None:
        """Raise InvalidConnectionState if the snapshot breaks a state invariant."""
        for chain_id, uid in self.connectors.items():
            if uid not in self.connections:
                raise InvalidConnectionState(f"chain {chain_id} maps to unknown connector {uid}")
            if self.connections[uid].chain_id != chain_id:
                raise InvalidConnectionState(f"index mismatch for chain {chain_id}")
        chains = [c.chain_id for c in self.connections.values()]
        if len(chains) != len(set(chains)):
            raise InvalidConnectionState("a chain is served by more than one connector")
        for uid, c in self.connections.items():
            if c.connector.uid != uid:
                raise InvalidConnectionState(f"connection keyed by {uid} belongs to {c.connector.uid}")
        if self.status is ConnectionStatus.CONNECTED and not self.connections:
            raise InvalidConnectionState("status connected with no connections")
        if self.status is ConnectionStatus.DISCONNECTED and self.connections:
            raise InvalidConnectionState("status disconnected with live connections")


__all__ = ["ConnectionStatus", "Connection", "ConnectionState"]
