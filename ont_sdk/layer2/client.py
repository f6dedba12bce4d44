"""
Layer-2 façade over a `ClientManager`.

Queries reuse the wrapped manager's transports and qid counter, so ids stay
unique across main-chain and layer-2 calls made through either object.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..client.base import Op
from ..client.manager import ClientManager
from ..errors import ProofError
from ..types import decode
from ..types.core import Address, Hash, Layer2Block, Layer2StoreProof
from ..utils.bytes import BytesLike, from_hex, reverse_bytes
from .proof import decode_range_proof

log = logging.getLogger(__name__)

# Prefix byte of contract-scoped storage keys in the layer-2 state tree
STORAGE_KEY_PREFIX = b"\x05"


def layer2_store_key(contract_address: Optional[Address], key: BytesLike) -> bytes:
    """
    State-tree key for *key* under *contract_address* (hex, node byte order).

    Without a contract the key is used as is. Malformed hex raises ValueError.
    """
    key = bytes(key)
    if not contract_address:
        return key
    return STORAGE_KEY_PREFIX + reverse_bytes(from_hex(contract_address)) + key


def verify_layer2_store_proof(
    key: BytesLike, value: BytesLike, proof: BytesLike, state_root: BytesLike
) -> bool:
    """
    Check that *proof* shows *key* maps to *value* under *state_root*.

    Returns True, or raises ProofError with `stage` set to "decode",
    "verify" or "verify_item".
    """
    rp = decode_range_proof(proof)
    try:
        rp.verify(state_root)
    except ProofError as e:
        raise ProofError(f"verify store proof: {e.message}", stage="verify") from e
    try:
        rp.verify_item(key, value)
    except ProofError as e:
        raise ProofError(f"verify store proof item: {e.message}", stage="verify_item") from e
    return True


class Layer2ClientManager:
    """Layer-2 queries plus local store-proof helpers."""

    def __init__(self, client: ClientManager) -> None:
        self._client = client

    @property
    def client(self) -> ClientManager:
        return self._client

    def get_layer2_block_by_height(self, height: int) -> Layer2Block:
        return decode.get_layer2_block(self._client.call(Op.BLOCK_BY_HEIGHT, height=int(height)))

    def get_layer2_block_by_hash(self, block_hash: Hash) -> Layer2Block:
        return decode.get_layer2_block(self._client.call(Op.BLOCK_BY_HASH, hash=block_hash))

    def get_layer2_store_key(self, contract_address: Optional[Address], key: BytesLike) -> bytes:
        return layer2_store_key(contract_address, key)

    def get_layer2_store_proof(self, key: BytesLike) -> Layer2StoreProof:
        data = self._client.call(Op.LAYER2_STORE_PROOF, key=bytes(key))
        return decode.get_layer2_store_proof(data)

    def verify_layer2_store_proof(
        self, key: BytesLike, value: BytesLike, proof: BytesLike, state_root: BytesLike
    ) -> bool:
        ok = verify_layer2_store_proof(key, value, proof, state_root)
        log.debug("layer2 store proof verified for key=%s", bytes(key).hex())
        return ok


__all__ = [
    "Layer2ClientManager",
    "STORAGE_KEY_PREFIX",
    "layer2_store_key",
    "verify_layer2_store_proof",
]
