"""
Wallet connectors and the factory helpers applications register them with:

    connectors = [
        injected(id="metamask", name="MetaMask", host=host),
        injected(id="keplr", name="Keplr", provider=lambda h: (h.get("keplr") or {}).get("ethereum"), host=host),
        passkey(credentials),
    ]
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .base import Connector
from .injected import InjectedConnector, Provider, ProviderLookup
from .passkey import AccountResolver, CredentialDeclined, CredentialProvider, PasskeyAssertion, PasskeyConnector


def injected(
    *,
    id: str = "metamask",
    name: Optional[str] = None,
    icon: Optional[str] = None,
    provider: Optional[ProviderLookup] = None,
    host: Optional[Mapping[str, Any]] = None,
) -> InjectedConnector:
    return InjectedConnector(id=id, name=name or id.capitalize(), icon=icon, provider=provider, host=host)


def passkey(
    credentials: CredentialProvider,
    *,
    id: str = "passkey",
    name: str = "Passkey",
    icon: Optional[str] = None,
    rp_id: Optional[str] = None,
    accounts: Optional[AccountResolver] = None,
) -> PasskeyConnector:
    return PasskeyConnector(credentials, id=id, name=name, icon=icon, rp_id=rp_id, accounts=accounts)


__all__ = [
    "Connector",
    "InjectedConnector",
    "PasskeyConnector",
    "PasskeyAssertion",
    "CredentialProvider",
    "CredentialDeclined",
    "Provider",
    "ProviderLookup",
    "AccountResolver",
    "injected",
    "passkey",
]
