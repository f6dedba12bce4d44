"""
Shared pytest fixtures:
- RecordingClient: an in-memory transport that answers from a script and
  records every (qid, op, params) it receives
- manager: a ClientManager with a RecordingClient in the RPC slot
- proofs: helpers that build small, valid layer-2 range proofs
"""
from __future__ import annotations

import json
import threading
import typing as t

import pytest

from ont_sdk.client import ClientManager, OntologyClient, Op
from ont_sdk.layer2.proof import (ProofInnerNode, ProofLeafNode, RangeProof,
                                  encode_range_proof, path_root_hash)

Reply = t.Union[bytes, Exception, t.Callable[[t.Mapping[str, t.Any]], bytes]]


class RecordingClient(OntologyClient):
    """Scripted transport. Replies are bytes, an exception to raise, or a callable."""

    kind = "recording"

    def __init__(self, replies: t.Optional[t.Dict[Op, t.Any]] = None, name: str = "recording"):
        self.replies: t.Dict[Op, t.Any] = dict(replies or {})
        self.calls: t.List[t.Tuple[str, Op, t.Dict[str, t.Any]]] = []
        self.closed = False
        self.name = name
        self._lock = threading.Lock()

    def reply(self, op: Op, value: t.Any) -> None:
        self.replies[op] = value

    def reply_json(self, op: Op, value: t.Any) -> None:
        self.replies[op] = json.dumps(value).encode()

    def call(self, qid: str, op: Op, params: t.Mapping[str, t.Any]) -> bytes:
        with self._lock:
            self.calls.append((qid, op, dict(params)))
        value = self.replies.get(op, b"null")
        if isinstance(value, list):
            # successive replies; the last one repeats
            value = value.pop(0) if len(value) > 1 else value[0]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(params)
        return value

    def close(self) -> None:
        self.closed = True

    @property
    def ops(self) -> t.List[Op]:
        return [op for _, op, _ in self.calls]

    @property
    def qids(self) -> t.List[str]:
        return [qid for qid, _, _ in self.calls]


@pytest.fixture
def recording() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def manager(recording: RecordingClient) -> ClientManager:
    return ClientManager(rpc=recording)


# ---------- layer-2 proofs ----------


class ProofFactory:
    """Builds proofs whose root is known, for keys in ascending order."""

    @staticmethod
    def single(key: bytes, value: bytes, sibling: bytes = b"\x11" * 32) -> t.Tuple[bytes, bytes]:
        """One leaf under a single inner node with a right sibling. Returns (blob, root)."""
        leaf = ProofLeafNode.of(key, value, version=1)
        path = [ProofInnerNode(height=1, size=2, version=1, right=sibling)]
        proof = RangeProof.for_single_leaf(path, leaf)
        return encode_range_proof(proof), path_root_hash(path, leaf)

    @staticmethod
    def pair(k1: bytes, v1: bytes, k2: bytes, v2: bytes) -> t.Tuple[bytes, bytes]:
        """Two sibling leaves (k1 < k2). Returns (blob, root)."""
        left = ProofLeafNode.of(k1, v1, version=3)
        right = ProofLeafNode.of(k2, v2, version=4)
        path = [ProofInnerNode(height=1, size=2, version=4, right=right.hash())]
        proof = RangeProof(left_path=path, inner_nodes=[[]], leaves=[left, right])
        return encode_range_proof(proof), path_root_hash(path, left)

    @classmethod
    def tree(cls, items: t.Sequence[t.Tuple[bytes, bytes]]) -> t.Tuple[bytes, bytes]:
        """
        A balanced tree over *items* (sorted by key) and a proof covering
        every leaf. Returns (blob, root).
        """
        leaves = [ProofLeafNode.of(k, v, version=1) for k, v in items]
        root, _, _, left_path, inner_nodes = cls._subtree(leaves)
        proof = RangeProof(left_path=left_path, inner_nodes=inner_nodes, leaves=leaves)
        return encode_range_proof(proof), root

    @classmethod
    def _subtree(cls, leaves: t.List[ProofLeafNode]):
        # -> (hash, height, size, path to leftmost leaf, inner paths for the rest)
        if len(leaves) == 1:
            return leaves[0].hash(), 0, 1, [], []
        mid = len(leaves) // 2
        l_hash, l_height, l_size, l_path, l_inner = cls._subtree(leaves[:mid])
        r_hash, r_height, r_size, r_path, r_inner = cls._subtree(leaves[mid:])
        height, size = max(l_height, r_height) + 1, l_size + r_size
        node = ProofInnerNode(height=height, size=size, version=1, right=r_hash)
        return node.hash(l_hash), height, size, [node] + l_path, l_inner + [r_path] + r_inner

    @staticmethod
    def chain(n: int) -> RangeProof:
        """*n* leaves hung off a right-leaning spine, one inner path per leaf."""
        leaves = [ProofLeafNode.of(i.to_bytes(4, "big"), b"v", version=1) for i in range(n)]
        spine: t.List[ProofInnerNode] = []
        h = leaves[-1].hash()
        for leaf in reversed(leaves[:-1]):
            node = ProofInnerNode(height=1, size=2, version=1, right=h)
            spine.append(node)
            h = node.hash(leaf.hash())
        spine.reverse()
        return RangeProof(
            left_path=[spine[0]],
            inner_nodes=[[node] for node in spine[1:]] + [[]],
            leaves=leaves,
        )


@pytest.fixture
def proofs() -> ProofFactory:
    return ProofFactory()
