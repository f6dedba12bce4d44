"""
ont_sdk.layer2.proof
====================

Range proofs over the layer-2 state tree (an AVL+ Merkle tree).

A proof carries:
  * ``left_path``   - inner nodes from the root down to the first leaf
  * ``inner_nodes`` - one path per additional leaf, rooted at the right branch
                      left open by the previous path
  * ``leaves``      - the proven leaves, sorted by key

Hashing (SHA-256, integers as zig-zag varints, byte strings length-prefixed):

    leaf  = H(varint(0) || varint(1) || varint(version) || bytes(key) || bytes(sha256(value)))
    inner = H(varint(height) || varint(size) || varint(version) || bytes(L) || bytes(R))

where exactly one of L/R is the child hash being folded upwards.

Wire form is CBOR (`cbor2`)::

    {"leftPath": [inner...], "innerNodes": [[inner...], ...], "leaves": [leaf...]}
    inner = {"height", "size", "version", "left", "right"}
    leaf  = {"key", "valueHash", "version"}

Usage
-----
    proof = decode_range_proof(blob)
    proof.verify(state_root)        # anchors the proof, raises ProofError
    proof.verify_item(key, value)   # inclusion, raises ProofError
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import cbor2

from ..errors import ProofError
from ..utils.bytes import BytesLike, encode_var_bytes, varint_encode
from ..utils.hash import sha256

# --- Nodes -------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ProofInnerNode:
    height: int
    size: int
    version: int
    left: bytes = b""
    right: bytes = b""

    def hash(self, child: bytes) -> bytes:
        buf = bytearray()
        buf += varint_encode(self.height)
        buf += varint_encode(self.size)
        buf += varint_encode(self.version)
        if not self.left:
            buf += encode_var_bytes(child)
            buf += encode_var_bytes(self.right)
        else:
            buf += encode_var_bytes(self.left)
            buf += encode_var_bytes(child)
        return sha256(bytes(buf))


@dataclass(slots=True, frozen=True)
class ProofLeafNode:
    key: bytes
    value_hash: bytes
    version: int

    @classmethod
    def of(cls, key: BytesLike, value: BytesLike, version: int = 0) -> "ProofLeafNode":
        return cls(key=bytes(key), value_hash=sha256(bytes(value)), version=int(version))

    def hash(self) -> bytes:
        buf = bytearray()
        buf += varint_encode(0)
        buf += varint_encode(1)
        buf += varint_encode(self.version)
        buf += encode_var_bytes(self.key)
        buf += encode_var_bytes(self.value_hash)
        return sha256(bytes(buf))


PathToLeaf = Sequence[ProofInnerNode]


def path_root_hash(path: PathToLeaf, leaf: ProofLeafNode) -> bytes:
    """Fold *leaf* up through *path* (root first) and return the root hash."""
    h = leaf.hash()
    for node in reversed(path):
        h = node.hash(h)
    return h


# --- Range proof -------------------------------------------------------------


class _Frame:
    """A path whose right branches are being matched, scanned bottom-up."""

    __slots__ = ("path", "root", "cursor", "expected")

    def __init__(self, path: PathToLeaf, root: bytes) -> None:
        self.path = path
        self.root = root
        self.cursor = len(path)
        self.expected = b""

    def next_right(self) -> Optional[ProofInnerNode]:
        while self.cursor > 0:
            self.cursor -= 1
            node = self.path[self.cursor]
            if node.right:
                return node
        return None


@dataclass
class RangeProof:
    left_path: List[ProofInnerNode] = field(default_factory=list)
    inner_nodes: List[List[ProofInnerNode]] = field(default_factory=list)
    leaves: List[ProofLeafNode] = field(default_factory=list)
    root_hash: Optional[bytes] = field(default=None, repr=False)
    root_verified: bool = field(default=False, repr=False)

    def compute_root_hash(self) -> bytes:
        """
        Derive the root from the paths and leaves, checking that every right
        branch recorded on the way matches the subtree rebuilt from the
        remaining leaves. Raises ProofError on a malformed proof.

        Each inner path is walked like the left path: fold its leaf up to a
        subtree root, then descend into the next inner path for each right
        branch from the bottom up. Frames are kept on an explicit stack, so
        proof size is not bounded by the interpreter's recursion limit.
        """
        leaves, inners = self.leaves, self.inner_nodes
        if not leaves:
            raise ProofError("proof has no leaves", stage="verify")
        if len(inners) + 1 != len(leaves):
            raise ProofError(
                f"inner paths ({len(inners)}) must be one fewer than leaves ({len(leaves)})",
                stage="verify",
            )
        # invariant: next leaf index == next inner path index + 1
        next_leaf = 1
        root = path_root_hash(self.left_path, leaves[0])
        if next_leaf == len(leaves):
            return root

        stack = [_Frame(self.left_path, root)]
        result: Optional[Tuple[bytes, bool]] = None
        while stack:
            frame = stack[-1]
            if result is not None:
                sub_root, done = result
                result = None
                if sub_root != frame.expected:
                    raise ProofError(
                        f"intermediate root hash {frame.expected.hex()} doesn't match, got {sub_root.hex()}",
                        stage="verify",
                    )
                if done:
                    stack.pop()
                    result = (frame.root, True)
                    continue
            node = frame.next_right()
            if node is None:
                stack.pop()
                result = (frame.root, False)
                continue
            path = inners[next_leaf - 1]
            sub_root = path_root_hash(path, leaves[next_leaf])
            next_leaf += 1
            frame.expected = node.right
            if next_leaf == len(leaves):
                result = (sub_root, True)
            else:
                stack.append(_Frame(path, sub_root))

        assert result is not None
        root, done = result
        if not done:
            raise ProofError("left over leaves -- malformed proof", stage="verify")
        return root

    def verify(self, root: BytesLike) -> None:
        """Anchor the proof to *root*; must succeed before `verify_item`."""
        try:
            computed = self.root_hash if self.root_hash is not None else self.compute_root_hash()
        except ValueError as e:
            # node fields that cannot be varint-encoded
            raise ProofError(f"cannot hash proof node: {e}", stage="verify") from e
        self.root_hash = computed
        if computed != bytes(root):
            self.root_verified = False
            raise ProofError(
                f"invalid root: expected {bytes(root).hex()}, computed {computed.hex()}",
                stage="verify",
            )
        self.root_verified = True

    def verify_item(self, key: BytesLike, value: BytesLike) -> None:
        """Check that (*key*, *value*) is one of the proven leaves."""
        if not self.root_verified:
            raise ProofError("must call verify(root) first", stage="verify_item")
        key = bytes(key)
        keys = [leaf.key for leaf in self.leaves]
        i = bisect.bisect_left(keys, key)
        if i >= len(keys) or keys[i] != key:
            raise ProofError("leaf key not found in proof", stage="verify_item")
        if self.leaves[i].value_hash != sha256(bytes(value)):
            raise ProofError("leaf value hash not same", stage="verify_item")

    # --- construction helpers --------------------------------------------

    @classmethod
    def for_single_leaf(
        cls, path: Sequence[ProofInnerNode], leaf: ProofLeafNode
    ) -> "RangeProof":
        return cls(left_path=list(path), inner_nodes=[], leaves=[leaf])


# --- CBOR codec --------------------------------------------------------------


def _inner_to_obj(n: ProofInnerNode) -> Dict[str, Any]:
    return {
        "height": n.height,
        "size": n.size,
        "version": n.version,
        "left": n.left,
        "right": n.right,
    }


def _leaf_to_obj(n: ProofLeafNode) -> Dict[str, Any]:
    return {"key": n.key, "valueHash": n.value_hash, "version": n.version}


def _bytes_field(obj: Mapping[str, Any], name: str) -> bytes:
    v = obj.get(name) or b""
    if not isinstance(v, (bytes, bytearray)):
        raise TypeError(f"{name} must be a byte string")
    return bytes(v)


_INT8 = (-(1 << 7), (1 << 7) - 1)
_INT64 = (-(1 << 63), (1 << 63) - 1)


def _int_field(obj: Mapping[str, Any], name: str, bounds: Tuple[int, int]) -> int:
    v = obj[name]
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an integer")
    lo, hi = bounds
    if not lo <= v <= hi:
        raise ValueError(f"{name} {v} out of range [{lo}, {hi}]")
    return v


def _inner_from_obj(obj: Mapping[str, Any]) -> ProofInnerNode:
    # tree heights are int8 on the node side; sizes and versions are int64
    return ProofInnerNode(
        height=_int_field(obj, "height", _INT8),
        size=_int_field(obj, "size", _INT64),
        version=_int_field(obj, "version", _INT64),
        left=_bytes_field(obj, "left"),
        right=_bytes_field(obj, "right"),
    )


def _leaf_from_obj(obj: Mapping[str, Any]) -> ProofLeafNode:
    return ProofLeafNode(
        key=_bytes_field(obj, "key"),
        value_hash=_bytes_field(obj, "valueHash"),
        version=_int_field(obj, "version", _INT64),
    )


def encode_range_proof(proof: RangeProof) -> bytes:
    return cbor2.dumps(
        {
            "leftPath": [_inner_to_obj(n) for n in proof.left_path],
            "innerNodes": [[_inner_to_obj(n) for n in path] for path in proof.inner_nodes],
            "leaves": [_leaf_to_obj(n) for n in proof.leaves],
        },
        canonical=True,
    )


def decode_range_proof(blob: BytesLike) -> RangeProof:
    """Parse a CBOR proof blob. Raises ProofError(stage="decode")."""
    try:
        obj = cbor2.loads(bytes(blob))
        if not isinstance(obj, Mapping):
            raise TypeError(f"expected map, got {type(obj).__name__}")
        return RangeProof(
            left_path=[_inner_from_obj(n) for n in obj.get("leftPath") or ()],
            inner_nodes=[[_inner_from_obj(n) for n in path] for path in obj.get("innerNodes") or ()],
            leaves=[_leaf_from_obj(n) for n in obj.get("leaves") or ()],
        )
    except (cbor2.CBORDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise ProofError(f"cannot decode range proof: {e}", stage="decode") from e


__all__ = [
    "ProofInnerNode",
    "ProofLeafNode",
    "PathToLeaf",
    "RangeProof",
    "path_root_hash",
    "encode_range_proof",
    "decode_range_proof",
]
