"""
ont_sdk.types.decode
====================

Response decoders: raw bytes returned by a transport -> typed result.

Every transport hands back the JSON encoding of the node's `result` field, so
each decoder parses JSON first and then shapes it into the dataclasses from
:mod:`ont_sdk.types.core`. Any mismatch raises :class:`ont_sdk.errors.DecodeError`
carrying the raw payload.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, List, Optional, TypeVar

from ..errors import DecodeError
from ..utils.bytes import from_hex
from .core import (Block, BlockTxHashes, CrossStatesProof, DeployCode, Hash,
                   Layer2Block, Layer2StoreProof, MemPoolTxCount,
                   MemPoolTxState, MerkleProof, PreExecResult,
                   SmartContractEvent, Transaction)

T = TypeVar("T")

_HASH_RE = re.compile(r"^[0-9a-fA-F]{64}$")
_UINT32_MAX = 0xFFFFFFFF

# Nodes disagree on how to say "no events": some send an empty body, some a
# JSON empty string.
EMPTY_EVENT_PAYLOADS = (b"", b'""')


def load_json(data: Optional[bytes], what: str) -> Any:
    """Parse *data* as JSON, raising DecodeError with the raw payload on failure."""
    if data is None:
        raise DecodeError(what, "empty response", payload=None)
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(what, f"invalid json: {e}", payload=bytes(data)) from e


def _shape(data: bytes, what: str, build: Callable[[Any], T]) -> T:
    obj = load_json(data, what)
    try:
        return build(obj)
    except DecodeError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(what, f"unexpected shape: {e!r}", payload=bytes(data)) from e


def _as_dict(obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError(f"expected object, got {type(obj).__name__}")
    return obj


def _as_str(obj: Any) -> str:
    if not isinstance(obj, str):
        raise TypeError(f"expected string, got {type(obj).__name__}")
    return obj


# --- Scalars -----------------------------------------------------------------


def get_uint32(data: bytes) -> int:
    def build(obj: Any) -> int:
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise TypeError(f"expected integer, got {type(obj).__name__}")
        if not 0 <= obj <= _UINT32_MAX:
            raise ValueError(f"{obj} out of uint32 range")
        return obj

    return _shape(data, "uint32", build)


def get_uint256(data: bytes) -> Hash:
    def build(obj: Any) -> Hash:
        s = _as_str(obj)
        if not _HASH_RE.match(s):
            raise ValueError(f"not a 32-byte hex hash: {s!r}")
        return s.lower()

    return _shape(data, "uint256", build)


def get_version(data: bytes) -> str:
    return _shape(data, "version", _as_str)


def get_cross_chain_msg(data: bytes) -> str:
    return _shape(data, "cross chain msg", _as_str)


def get_storage(data: bytes) -> bytes:
    return _shape(data, "storage", lambda obj: from_hex(_as_str(obj)))


# --- Structured results ------------------------------------------------------


def get_block(data: bytes) -> Block:
    return _shape(data, "block", lambda obj: Block.from_rpc_dict(_as_dict(obj)))


def get_transaction(data: bytes) -> Transaction:
    return _shape(data, "transaction", lambda obj: Transaction.from_rpc_dict(_as_dict(obj)))


def get_block_tx_hashes(data: bytes) -> BlockTxHashes:
    return _shape(data, "block tx hashes", lambda obj: BlockTxHashes.from_rpc_dict(_as_dict(obj)))


def get_smart_contract(data: bytes) -> DeployCode:
    return _shape(data, "smart contract", lambda obj: DeployCode.from_rpc_dict(_as_dict(obj)))


def get_smart_contract_event(data: bytes) -> SmartContractEvent:
    return _shape(
        data, "smart contract event", lambda obj: SmartContractEvent.from_rpc_dict(_as_dict(obj))
    )


def get_smart_contract_events(data: bytes) -> List[SmartContractEvent]:
    def build(obj: Any) -> List[SmartContractEvent]:
        if obj is None:
            return []
        if not isinstance(obj, list):
            raise TypeError(f"expected list, got {type(obj).__name__}")
        return [SmartContractEvent.from_rpc_dict(_as_dict(e)) for e in obj]

    return _shape(data, "smart contract events", build)


def get_merkle_proof(data: bytes) -> MerkleProof:
    return _shape(data, "merkle proof", lambda obj: MerkleProof.from_rpc_dict(_as_dict(obj)))


def get_cross_states_proof(data: bytes) -> CrossStatesProof:
    return _shape(
        data, "cross states proof", lambda obj: CrossStatesProof.from_rpc_dict(_as_dict(obj))
    )


def get_mem_pool_tx_state(data: bytes) -> MemPoolTxState:
    return _shape(data, "mempool tx state", lambda obj: MemPoolTxState.from_rpc_dict(_as_dict(obj)))


def get_mem_pool_tx_count(data: bytes) -> MemPoolTxCount:
    def build(obj: Any) -> MemPoolTxCount:
        if not isinstance(obj, list):
            raise TypeError(f"expected list, got {type(obj).__name__}")
        return MemPoolTxCount.from_rpc_list(obj)

    return _shape(data, "mempool tx count", build)


def get_pre_exec_result(data: bytes) -> PreExecResult:
    """
    Pre-execution results must be a JSON object; the raw payload is echoed in
    the error message so a protocol mismatch is visible in logs.
    """
    try:
        obj = json.loads(data)
    except (ValueError, TypeError, UnicodeDecodeError) as e:
        shown = data.decode("utf-8", "replace") if isinstance(data, (bytes, bytearray)) else data
        raise DecodeError(
            "PreExecResult", f"json decode PreExecResult:{shown} error:{e}", payload=data
        ) from e
    try:
        return PreExecResult.from_rpc_dict(_as_dict(obj))
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(
            "PreExecResult", f"unexpected shape {obj!r}: {e}", payload=bytes(data)
        ) from e


def get_layer2_block(data: bytes) -> Layer2Block:
    return _shape(data, "layer2 block", lambda obj: Layer2Block.from_rpc_dict(_as_dict(obj)))


def get_layer2_store_proof(data: bytes) -> Layer2StoreProof:
    return _shape(
        data, "layer2 store proof", lambda obj: Layer2StoreProof.from_rpc_dict(_as_dict(obj))
    )


__all__ = [
    "EMPTY_EVENT_PAYLOADS",
    "load_json",
    "get_uint32",
    "get_uint256",
    "get_version",
    "get_cross_chain_msg",
    "get_storage",
    "get_block",
    "get_transaction",
    "get_block_tx_hashes",
    "get_smart_contract",
    "get_smart_contract_event",
    "get_smart_contract_events",
    "get_merkle_proof",
    "get_cross_states_proof",
    "get_mem_pool_tx_state",
    "get_mem_pool_tx_count",
    "get_pre_exec_result",
    "get_layer2_block",
    "get_layer2_store_proof",
]
