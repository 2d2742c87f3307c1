"""
Session persistence for the connection manager.

A session is the list of connection records produced by
`Connection.to_record()` (chain id, connector id, username, accounts).
`FileStorage` keeps it as a JSON file so `ConnectionManager.reconnect()` can
restore connections in a new process.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

log = logging.getLogger(__name__)

Record = Dict[str, Any]

_REQUIRED = ("chain_id", "connector_id", "username")


class SessionStorage(Protocol):
    def load(self) -> Optional[List[Record]]: ...

    def save(self, records: List[Record]) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    def __init__(self, records: Optional[List[Record]] = None) -> None:
        self._records: Optional[List[Record]] = [dict(r) for r in records] if records is not None else None

    def load(self) -> Optional[List[Record]]:
        return [dict(r) for r in self._records] if self._records is not None else None

    def save(self, records: List[Record]) -> None:
        self._records = [dict(r) for r in records]

    def clear(self) -> None:
        self._records = None


class FileStorage:
    """JSON file store. Writes go through a temp file + rename so a crash never leaves half a session."""

    def __init__(self, path: Union[str, os.PathLike]) -> None:
        self.path = Path(path)

    def load(self) -> Optional[List[Record]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("storage: ignoring corrupt session file %s", self.path)
            return None
        records = data.get("connections") if isinstance(data, dict) else None
        if not isinstance(records, list):
            log.warning("storage: session file %s has no connection list", self.path)
            return None
        return [r for r in records if isinstance(r, dict) and all(k in r for k in _REQUIRED)]

    def save(self, records: List[Record]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        body = json.dumps({"version": 1, "connections": records}, indent=2, sort_keys=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".session-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(body)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


__all__ = ["Record", "SessionStorage", "MemoryStorage", "FileStorage"]
