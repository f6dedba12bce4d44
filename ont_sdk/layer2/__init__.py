"""
ont_sdk.layer2
==============

Layer-2 block queries and state proofs.

- client : `Layer2ClientManager`, store-key construction, proof verification
- proof  : `RangeProof` and its CBOR codec
"""

from __future__ import annotations

from .client import (STORAGE_KEY_PREFIX, Layer2ClientManager, layer2_store_key,
                     verify_layer2_store_proof)
from .proof import (ProofInnerNode, ProofLeafNode, RangeProof,
                    decode_range_proof, encode_range_proof)

__all__ = [
    "Layer2ClientManager",
    "STORAGE_KEY_PREFIX",
    "layer2_store_key",
    "verify_layer2_store_proof",
    "ProofInnerNode",
    "ProofLeafNode",
    "RangeProof",
    "decode_range_proof",
    "encode_range_proof",
]
