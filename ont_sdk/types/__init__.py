"""
ont_sdk.types
=============

Typed results returned by the client manager and the decoders that build them.

    from ont_sdk.types import Block, Transaction
    from ont_sdk.types import decode
"""

from __future__ import annotations

from . import decode as decode
from .core import (Address, Block, BlockHeader, BlockTxHashes,
                   CrossStatesProof, DeployCode, Hash, Hex, Layer2Block,
                   Layer2BlockHeader, Layer2StoreProof, MemPoolTxCount,
                   MemPoolTxState, MerkleProof, NotifyEventInfo,
                   PreExecResult, Sig, SmartContractEvent, Transaction,
                   TxState)

__all__ = [
    "decode",
    "Address",
    "Hash",
    "Hex",
    "Sig",
    "Transaction",
    "BlockHeader",
    "Block",
    "BlockTxHashes",
    "DeployCode",
    "NotifyEventInfo",
    "SmartContractEvent",
    "PreExecResult",
    "MerkleProof",
    "CrossStatesProof",
    "TxState",
    "MemPoolTxState",
    "MemPoolTxCount",
    "Layer2BlockHeader",
    "Layer2Block",
    "Layer2StoreProof",
]
