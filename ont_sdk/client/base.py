"""Transport contract.

Every transport (JSON-RPC, REST, WebSocket) answers the same question: given a
correlation id, an operation and its parameters, return the raw JSON bytes of
the node's result or raise. The manager never looks at the wire format.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping


class Op(str, Enum):
    """Operations a transport must be able to carry."""

    CURRENT_BLOCK_HEIGHT = "current_block_height"
    CURRENT_BLOCK_HASH = "current_block_hash"
    BLOCK_BY_HEIGHT = "block_by_height"
    BLOCK_BY_HASH = "block_by_hash"
    BLOCK_INFO_BY_HEIGHT = "block_info_by_height"
    RAW_TRANSACTION = "raw_transaction"
    BLOCK_HASH = "block_hash"
    BLOCK_HEIGHT_BY_TX_HASH = "block_height_by_tx_hash"
    BLOCK_TX_HASHES_BY_HEIGHT = "block_tx_hashes_by_height"
    STORAGE = "storage"
    SMART_CONTRACT = "smart_contract"
    SMART_CONTRACT_EVENT = "smart_contract_event"
    SMART_CONTRACT_EVENT_BY_BLOCK = "smart_contract_event_by_block"
    MERKLE_PROOF = "merkle_proof"
    CROSS_STATES_PROOF = "cross_states_proof"
    CROSS_CHAIN_MSG = "cross_chain_msg"
    MEM_POOL_TX_STATE = "mem_pool_tx_state"
    MEM_POOL_TX_COUNT = "mem_pool_tx_count"
    VERSION = "version"
    NETWORK_ID = "network_id"
    SEND_RAW_TRANSACTION = "send_raw_transaction"
    LAYER2_STORE_PROOF = "layer2_store_proof"


class OntologyClient(ABC):
    """Minimal contract for a node transport."""

    #: short label used in logs ("rpc", "rest", "ws", ...)
    kind: str = "custom"

    @abstractmethod
    def call(self, qid: str, op: Op, params: Mapping[str, Any]) -> bytes:
        """Issue *op* tagged with *qid*; return the JSON-encoded result."""

    def close(self) -> None:
        """Release sockets/sessions. Default: nothing to release."""

    def __enter__(self) -> "OntologyClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["Op", "OntologyClient"]
