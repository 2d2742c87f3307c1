"""
Connection state machine.

    disconnected -> connecting -> connected
    connected <-> reconnecting -> {connected, disconnected}

`ConnectionManager` owns the current `ConnectionState` snapshot and is its
only writer. Observers subscribe and receive every published snapshot;
readers get immutable snapshots through `.state`.

`connect` / `disconnect` may interleave at await points; each one commits a
whole new snapshot computed from the state current at commit time, so the
table invariants hold whatever the interleaving (last writer wins per chain).

`reconnect` is single-flight per manager: a call made while one is running
returns immediately. It walks the persisted session (or, with no storage, the
live connections), reconnects each entry on the registered connector with the
same id, drops entries that fail, and publishes after every attempt so
observers see connections come back one by one. Each of those snapshots is
built from the live table: connections that were up when the pass began are
replaced by their restored counterparts, while a `connect()` or
`disconnect()` that lands mid-pass is kept (a restore for the same chain
later in the pass still replaces it).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Union

from ..config import SDKConfig
from ..errors import ConnectorNotFound, InvalidSelector, NoConnectorForChain
from .connectors.base import Connector
from .state import Connection, ConnectionState, ConnectionStatus
from .storage import FileStorage, Record, SessionStorage

log = logging.getLogger(__name__)

Listener = Callable[[ConnectionState], None]


class ConnectionManager:
    def __init__(self, connectors: Sequence[Connector], storage: Optional[SessionStorage] = None) -> None:
        self.connectors: List[Connector] = list(connectors)
        self.storage = storage
        self._state = ConnectionState.empty()
        self._listeners: List[Listener] = []
        self._reconnecting = False

    @classmethod
    def from_config(cls, connectors: Sequence[Connector], cfg: Optional[SDKConfig] = None) -> "ConnectionManager":
        """Persist sessions to ``cfg.session_path`` when one is configured."""
        cfg = cfg or SDKConfig.from_env()
        storage = FileStorage(cfg.session_path) if cfg.session_path else None
        return cls(connectors, storage)

    # --- observation -----------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_reconnecting(self) -> bool:
        return self._reconnecting

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: ConnectionState, *, persist: bool = False) -> None:
        state.check()
        prev, self._state = self._state, state
        log.debug(
            "connect: state %s -> %s connections=%d", prev.status.value, state.status.value, len(state.connections)
        )
        if persist and self.storage is not None:
            if state.connections:
                self.storage.save(state.to_records())
            else:
                self.storage.clear()
        for listener in list(self._listeners):
            listener(state)

    # --- lookups ---------------------------------------------------------

    def get_connector(self, id_or_uid: str) -> Connector:
        for c in self.connectors:
            if c.uid == id_or_uid:
                return c
        for c in self.connectors:
            if c.id == id_or_uid:
                return c
        raise ConnectorNotFound(id_or_uid)

    def _find_by_id(self, connector_id: str) -> Optional[Connector]:
        return next((c for c in self.connectors if c.id == connector_id), None)

    # --- transitions -----------------------------------------------------

    async def connect(self, connector: Union[Connector, str], chain_id: str, username: str) -> Connection:
        """
        Connect *connector* (instance, id or uid) to *chain_id* as *username*.

        Any connector previously serving *chain_id* is replaced. On failure
        the error propagates and the status settles back from the table.
        """
        if not isinstance(connector, Connector):
            connector = self.get_connector(connector)
        self._publish(self._state.with_status(ConnectionStatus.CONNECTING))
        log.debug("connect: %s -> chain=%s username=%s", connector.uid, chain_id, username)
        try:
            accounts = await connector.connect(chain_id, username)
        except BaseException:
            self._publish(self._state.settled())
            raise
        conn = Connection(chain_id=chain_id, connector=connector, username=username, accounts=tuple(accounts))
        self._publish(self._state.with_connection(conn), persist=True)
        log.info("connect: %s connected to %s (%d accounts)", connector.id, chain_id, len(conn.accounts))
        return conn

    async def disconnect(self, *, connector_uid: Optional[str] = None, chain_id: Optional[str] = None) -> None:
        """Disconnect by exactly one of *connector_uid* or *chain_id*."""
        if (connector_uid is None) == (chain_id is None):
            raise InvalidSelector()
        if connector_uid is None:
            connector_uid = self._state.connectors.get(chain_id)  # type: ignore[arg-type]
            if connector_uid is None:
                raise NoConnectorForChain(chain_id)  # type: ignore[arg-type]
        conn = self._state.connections.get(connector_uid)
        if conn is None:
            log.debug("connect: disconnect of unknown connector %s ignored", connector_uid)
            return
        await conn.connector.disconnect()
        self._publish(self._state.without(connector_uid), persist=True)
        log.info("connect: %s disconnected from %s", conn.connector.id, conn.chain_id)

    async def reconnect(self) -> None:
        if self._reconnecting:
            log.debug("connect: reconnect already in flight")
            return
        self._reconnecting = True
        try:
            await self._reconnect()
        finally:
            self._reconnecting = False

    def _session(self) -> List[Record]:
        if self.storage is not None:
            records = self.storage.load()
            if records is not None:
                return records
        return self._state.to_records()

    def _without(self, stale: Sequence[Connection]) -> ConnectionState:
        """The live table minus the connections that were up when reconnect began."""
        return ConnectionState.of(
            c for c in self._state.connections.values() if not any(c is s for s in stale)
        )

    async def _reconnect(self) -> None:
        records = self._session()
        if not records:
            self._publish(ConnectionState.empty(), persist=True)
            log.debug("connect: reconnect found no session")
            return

        stale = list(self._state.connections.values())
        self._publish(self._state.with_status(ConnectionStatus.RECONNECTING))

        restored = 0
        for rec in records:
            connector = self._find_by_id(rec["connector_id"])
            if connector is None:
                log.warning("connect: session references unknown connector %r; skipping", rec["connector_id"])
                continue
            chain_id, username = rec["chain_id"], rec["username"]
            try:
                accounts = await connector.connect(chain_id, username)
            except Exception as e:
                # Partial-failure policy: this chain simply stays disconnected.
                log.warning("connect: reconnect of %s to %s failed: %s", connector.id, chain_id, e)
                self._publish(self._without(stale))
                continue
            conn = Connection(
                chain_id=chain_id,
                connector=connector,
                username=username,
                accounts=tuple(accounts or rec.get("accounts") or ()),
            )
            restored += 1
            self._publish(self._without(stale).with_connection(conn))

        self._publish(self._without(stale), persist=True)
        log.info("connect: reconnect restored %d of %d connections", restored, len(records))


__all__ = ["ConnectionManager", "Listener"]
