"""
ont-sdk for Python
Node client for Ontology chains: JSON-RPC, REST and WebSocket transports behind
one manager, plus layer-2 state-proof verification.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    BlockWaitTimeout,
    DecodeError,
    NoClientError,
    OntSdkError,
    ProofError,
    RpcError,
    TxError,
)

# Manager (imported before the transports: they depend on client.base)
from .client import (  # noqa: F401
    ClientManager,
    Op,
    OntologyClient,
    QidCounter,
    TransportSlot,
    wait_for_generate_block,
)

# Transports
from .rpc import RestClient, RpcClient, WsClient  # noqa: F401

# Transactions
from .tx import MutableTransaction, TxType  # noqa: F401

# Layer-2
from .layer2 import (  # noqa: F401
    Layer2ClientManager,
    RangeProof,
    verify_layer2_store_proof,
)

__all__ = [
    "__version__",
    # Core
    "SDKConfig",
    "OntSdkError", "NoClientError", "RpcError", "DecodeError", "TxError", "ProofError",
    "BlockWaitTimeout",
    # Manager
    "ClientManager", "TransportSlot", "Op", "OntologyClient", "QidCounter",
    "wait_for_generate_block",
    # Transports
    "RpcClient", "RestClient", "WsClient",
    # Tx
    "MutableTransaction", "TxType",
    # Layer-2
    "Layer2ClientManager", "RangeProof", "verify_layer2_store_proof",
]
