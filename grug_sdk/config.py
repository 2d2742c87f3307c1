"""
SDK configuration: RPC endpoint, optional chain id, retry/timeouts and the
session file used to restore wallet connections.

- Loads sane defaults and supports overrides via environment variables (GRUG_*).
- Provides helpers for building HTTP headers and validating endpoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .version import __version__

_DEFAULT_RPC = "http://127.0.0.1:26657"

RPC_SCHEMES = ("http", "https", "ws", "wss")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(slots=True)
class SDKConfig:
    # Core
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    # None means "ask the chain" (query_info) when signing
    chain_id: Optional[str] = None
    # Transport behavior
    request_timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.15
    # Headers / identity
    user_agent: str = field(default_factory=lambda: f"grug-sdk-py/{__version__}")
    # Where connection sessions are persisted (None: in-memory only)
    session_path: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = "GRUG_") -> "SDKConfig":
        """
        Create config from environment variables:

        GRUG_RPC_URL            (http/https/ws/wss)
        GRUG_CHAIN_ID           (str) optional
        GRUG_TIMEOUT            (float seconds)
        GRUG_MAX_RETRIES        (int)
        GRUG_BACKOFF            (float seconds)
        GRUG_USER_AGENT         (str)
        GRUG_SESSION_PATH       (path) optional
        """
        rpc = _env(f"{prefix}RPC_URL", _DEFAULT_RPC)
        _ensure_scheme(rpc, RPC_SCHEMES)

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            chain_id=_env(f"{prefix}CHAIN_ID") or None,
            request_timeout=float(_env(f"{prefix}TIMEOUT", "10.0")),
            max_retries=int(_env(f"{prefix}MAX_RETRIES", "3")),
            backoff_base=float(_env(f"{prefix}BACKOFF", "0.15")),
            user_agent=_env(f"{prefix}USER_AGENT") or f"grug-sdk-py/{__version__}",
            session_path=_env(f"{prefix}SESSION_PATH") or None,
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], RPC_SCHEMES)
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "chain_id": self.chain_id,
            "request_timeout": float(self.request_timeout),
            "max_retries": int(self.max_retries),
            "backoff_base": float(self.backoff_base),
            "user_agent": self.user_agent,
            "session_path": self.session_path,
        }


__all__ = ["SDKConfig", "RPC_SCHEMES"]
