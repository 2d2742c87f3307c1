"""
grug_sdk.types
==============

Façade for SDK datatypes; everything lives in :mod:`grug_sdk.types.core`.

    from grug_sdk.types import core
    msg: core.Message

or import concrete names directly:

    from grug_sdk.types import Coin, Transfer, QueryBalance

Attributes are forwarded lazily from ``core`` on first access.
"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import List

__all__ = ["core"]


def _core() -> ModuleType:
    return importlib.import_module("grug_sdk.types.core")


def __getattr__(name: str):
    if name == "core":
        return _core()
    mod = _core()
    if name in mod.__all__:
        return getattr(mod, name)
    raise AttributeError(f"module 'grug_sdk.types' has no attribute '{name}'")


def __dir__() -> List[str]:
    return sorted(set(__all__) | set(_core().__all__))
