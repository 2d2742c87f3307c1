"""
grug SDK for Python.
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    BroadcastFailed,
    ConnectorNotFound,
    GrugSdkError,
    InvalidConnectionState,
    InvalidKeyType,
    InvalidSelector,
    NoConnectorForChain,
    ProofValidationError,
    ProviderNotFound,
    QueryFailed,
    RpcError,
    UnexpectedResponseShape,
    UserRejected,
)

# RPC
from .rpc import HttpTransport, WsTransport, connect_transport  # noqa: F401

# Client
from .client import Client  # noqa: F401

# Addresses
from .address import KeyType, compute_code_hash, derive_address, derive_salt  # noqa: F401

# Wallet
from .wallet.signer import Secp256k1SigningKey, Secp256r1SigningKey, SigningKey  # noqa: F401

# Tx helpers
from .tx.build import AdminOption, SigningOptions  # noqa: F401
from .tx.encode import create_sign_bytes  # noqa: F401

# Wire types
from .types.core import (  # noqa: F401
    Coin,
    Config,
    Execute,
    Instantiate,
    Message,
    Migrate,
    StoreCode,
    Transfer,
    Tx,
    UpdateConfig,
)

# Connections
from .connect import ConnectionManager, ConnectionStatus, FileStorage, MemoryStorage, injected, passkey  # noqa: F401

# Utilities
from .utils.serde import deserialize, serialize  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "SDKConfig",
    "GrugSdkError", "RpcError", "QueryFailed", "ProofValidationError", "UnexpectedResponseShape",
    "BroadcastFailed", "UserRejected", "NoConnectorForChain", "ConnectorNotFound", "ProviderNotFound",
    "InvalidSelector", "InvalidKeyType", "InvalidConnectionState",
    # RPC
    "HttpTransport", "WsTransport", "connect_transport",
    # Client
    "Client",
    # Address
    "KeyType", "derive_address", "derive_salt", "compute_code_hash",
    # Wallet
    "SigningKey", "Secp256k1SigningKey", "Secp256r1SigningKey",
    # Tx
    "AdminOption", "SigningOptions", "create_sign_bytes",
    # Types
    "Coin", "Config", "Message", "Transfer", "StoreCode", "Instantiate", "Execute", "Migrate", "UpdateConfig", "Tx",
    # Connections
    "ConnectionManager", "ConnectionStatus", "FileStorage", "MemoryStorage", "injected", "passkey",
    # Utilities
    "serialize", "deserialize",
]
