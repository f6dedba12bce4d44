from __future__ import annotations

"""
Core chain types for the Python SDK.

Ergonomic `@dataclass` models mirroring the node's JSON payloads (PascalCase
keys on the wire), each with `from_rpc_dict()` / `to_rpc_dict()` helpers.

- Wire dicts use hex strings for binary fields (no 0x prefix, as the node does).
- Dataclasses use Python `bytes` where appropriate.

Nothing here performs network I/O; these are just types and converters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from ..utils.bytes import from_hex as _hex_to_bytes
from ..utils.bytes import to_hex

# --- Common aliases ----------------------------------------------------------

Address = str  # base58 address or hex script hash depending on the call
Hash = str  # 64 hex chars, node byte order
Hex = str

JsonDict = Mapping[str, Any]


def _bytes_to_hex(data: bytes) -> str:
    return to_hex(data, prefix=False)


def _opt_bytes(d: JsonDict, key: str) -> bytes:
    v = d.get(key)
    return _hex_to_bytes(v) if v else b""


# --- Transactions ------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Sig:
    """A (possibly multi-) signature entry attached to a transaction."""

    pub_keys: Sequence[Hex]
    m: int
    sig_data: Sequence[Hex]

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {"PubKeys": list(self.pub_keys), "M": self.m, "SigData": list(self.sig_data)}

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Sig":
        return Sig(
            pub_keys=tuple(d.get("PubKeys") or ()),
            m=int(d.get("M", 0)),
            sig_data=tuple(d.get("SigData") or ()),
        )


@dataclass(slots=True, frozen=True)
class Transaction:
    """Immutable (finalized) transaction."""

    version: int
    tx_type: int
    nonce: int
    gas_price: int
    gas_limit: int
    payer: Address
    payload: bytes
    attributes: Sequence[Any] = field(default_factory=tuple)
    sigs: Sequence[Sig] = field(default_factory=tuple)
    hash: Optional[Hash] = None
    height: Optional[int] = None

    def to_rpc_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "Version": self.version,
            "TxType": self.tx_type,
            "Nonce": self.nonce,
            "GasPrice": self.gas_price,
            "GasLimit": self.gas_limit,
            "Payer": self.payer,
            "Payload": {"Code": _bytes_to_hex(self.payload)},
            "Attributes": list(self.attributes),
            "Sigs": [s.to_rpc_dict() for s in self.sigs],
        }
        if self.hash is not None:
            d["Hash"] = self.hash
        if self.height is not None:
            d["Height"] = self.height
        return d

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Transaction":
        payload = d.get("Payload") or {}
        code = payload.get("Code", "") if isinstance(payload, Mapping) else payload
        return Transaction(
            version=int(d.get("Version", 0)),
            tx_type=int(d["TxType"]),
            nonce=int(d.get("Nonce", 0)),
            gas_price=int(d.get("GasPrice", 0)),
            gas_limit=int(d.get("GasLimit", 0)),
            payer=d.get("Payer", ""),
            payload=_hex_to_bytes(code) if code else b"",
            attributes=tuple(d.get("Attributes") or ()),
            sigs=tuple(Sig.from_rpc_dict(s) for s in d.get("Sigs") or ()),
            hash=d.get("Hash"),
            height=int(d["Height"]) if "Height" in d else None,
        )


# --- Blocks ------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class BlockHeader:
    version: int
    prev_block_hash: Hash
    transactions_root: Hash
    block_root: Hash
    timestamp: int
    height: int
    consensus_data: int = 0
    next_bookkeeper: Optional[Address] = None
    bookkeepers: Sequence[Hex] = field(default_factory=tuple)
    sig_data: Sequence[Hex] = field(default_factory=tuple)
    hash: Optional[Hash] = None

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "BlockHeader":
        return BlockHeader(
            version=int(d.get("Version", 0)),
            prev_block_hash=d["PrevBlockHash"],
            transactions_root=d["TransactionsRoot"],
            block_root=d.get("BlockRoot", ""),
            timestamp=int(d["Timestamp"]),
            height=int(d["Height"]),
            consensus_data=int(d.get("ConsensusData", 0)),
            next_bookkeeper=d.get("NextBookkeeper"),
            bookkeepers=tuple(d.get("Bookkeepers") or ()),
            sig_data=tuple(d.get("SigData") or ()),
            hash=d.get("Hash"),
        )


@dataclass(slots=True, frozen=True)
class Block:
    hash: Hash
    header: BlockHeader
    transactions: Sequence[Transaction] = field(default_factory=tuple)
    size: Optional[int] = None

    @property
    def height(self) -> int:
        return self.header.height

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Block":
        return Block(
            hash=d["Hash"],
            header=BlockHeader.from_rpc_dict(d["Header"]),
            transactions=tuple(Transaction.from_rpc_dict(t) for t in d.get("Transactions") or ()),
            size=int(d["Size"]) if "Size" in d else None,
        )


@dataclass(slots=True, frozen=True)
class BlockTxHashes:
    hash: Hash
    height: int
    transactions: Sequence[Hash] = field(default_factory=tuple)

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "BlockTxHashes":
        return BlockTxHashes(
            hash=d["Hash"],
            height=int(d["Height"]),
            transactions=tuple(d.get("Transactions") or ()),
        )


# --- Contracts & events ------------------------------------------------------


@dataclass(slots=True, frozen=True)
class DeployCode:
    code: bytes
    vm_type: int
    name: str
    version: str
    author: str
    email: str
    description: str

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "DeployCode":
        vm_type = d.get("VmType")
        if vm_type is None:
            # older nodes report a boolean storage flag instead of the VM type
            vm_type = 1 if d.get("NeedStorage") else 0
        return DeployCode(
            code=_opt_bytes(d, "Code"),
            vm_type=int(vm_type),
            name=d.get("Name", ""),
            version=d.get("CodeVersion", d.get("Version", "")),
            author=d.get("Author", ""),
            email=d.get("Email", ""),
            description=d.get("Description", ""),
        )


@dataclass(slots=True, frozen=True)
class NotifyEventInfo:
    contract_address: Address
    states: Any

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {"ContractAddress": self.contract_address, "States": self.states}

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "NotifyEventInfo":
        return NotifyEventInfo(contract_address=d["ContractAddress"], states=d.get("States"))


@dataclass(slots=True, frozen=True)
class SmartContractEvent:
    tx_hash: Hash
    state: int
    gas_consumed: int
    notify: Sequence[NotifyEventInfo] = field(default_factory=tuple)

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "SmartContractEvent":
        return SmartContractEvent(
            tx_hash=d["TxHash"],
            state=int(d.get("State", 0)),
            gas_consumed=int(d.get("GasConsumed", 0)),
            notify=tuple(NotifyEventInfo.from_rpc_dict(n) for n in d.get("Notify") or ()),
        )


@dataclass(slots=True, frozen=True)
class PreExecResult:
    state: int
    gas: int
    result: Any
    notify: Sequence[NotifyEventInfo] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.state == 1

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "PreExecResult":
        return PreExecResult(
            state=int(d.get("State", 0)),
            gas=int(d.get("Gas", 0)),
            result=d.get("Result"),
            notify=tuple(NotifyEventInfo.from_rpc_dict(n) for n in d.get("Notify") or ()),
        )


# --- Proofs ------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class MerkleProof:
    type: str
    transactions_root: Hash
    block_height: int
    cur_block_root: Hash
    cur_block_height: int
    target_hashes: Sequence[Hash] = field(default_factory=tuple)

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "MerkleProof":
        return MerkleProof(
            type=d.get("Type", "MerkleProof"),
            transactions_root=d["TransactionsRoot"],
            block_height=int(d["BlockHeight"]),
            cur_block_root=d["CurBlockRoot"],
            cur_block_height=int(d["CurBlockHeight"]),
            target_hashes=tuple(d.get("TargetHashes") or ()),
        )


@dataclass(slots=True, frozen=True)
class CrossStatesProof:
    type: str
    audit_path: Hex

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "CrossStatesProof":
        return CrossStatesProof(type=d.get("Type", ""), audit_path=d["AuditPath"])


# --- Mempool -----------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TxState:
    type: int
    height: int
    err_code: int

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "TxState":
        return TxState(
            type=int(d.get("Type", 0)),
            height=int(d.get("Height", 0)),
            err_code=int(d.get("ErrCode", 0)),
        )


@dataclass(slots=True, frozen=True)
class MemPoolTxState:
    state: Sequence[TxState] = field(default_factory=tuple)

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "MemPoolTxState":
        return MemPoolTxState(state=tuple(TxState.from_rpc_dict(s) for s in d.get("State") or ()))


@dataclass(slots=True, frozen=True)
class MemPoolTxCount:
    verified: int
    unverified: int

    @staticmethod
    def from_rpc_list(items: Sequence[Any]) -> "MemPoolTxCount":
        if len(items) != 2:
            raise ValueError(f"expected [verified, unverified], got {len(items)} items")
        return MemPoolTxCount(verified=int(items[0]), unverified=int(items[1]))


# --- Layer-2 -----------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Layer2BlockHeader:
    version: int
    prev_block_hash: Hash
    transactions_root: Hash
    state_root: Hash
    timestamp: int
    height: int
    hash: Optional[Hash] = None

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Layer2BlockHeader":
        return Layer2BlockHeader(
            version=int(d.get("Version", 0)),
            prev_block_hash=d["PrevBlockHash"],
            transactions_root=d["TransactionsRoot"],
            state_root=d.get("StateRoot", ""),
            timestamp=int(d["Timestamp"]),
            height=int(d["Height"]),
            hash=d.get("Hash"),
        )


@dataclass(slots=True, frozen=True)
class Layer2Block:
    hash: Hash
    header: Layer2BlockHeader
    transactions: Sequence[Transaction] = field(default_factory=tuple)

    @property
    def height(self) -> int:
        return self.header.height

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Layer2Block":
        return Layer2Block(
            hash=d["Hash"],
            header=Layer2BlockHeader.from_rpc_dict(d["Header"]),
            transactions=tuple(Transaction.from_rpc_dict(t) for t in d.get("Transactions") or ()),
        )


@dataclass(slots=True, frozen=True)
class Layer2StoreProof:
    """Stored value plus the encoded range proof attesting it at `height`."""

    value: bytes
    proof: bytes
    height: int

    @staticmethod
    def from_rpc_dict(d: JsonDict) -> "Layer2StoreProof":
        return Layer2StoreProof(
            value=_opt_bytes(d, "Value"),
            proof=_hex_to_bytes(d["Proof"]),
            height=int(d.get("Height", 0)),
        )


# --- module exports ----------------------------------------------------------

__all__ = [
    # aliases
    "Address",
    "Hash",
    "Hex",
    # dataclasses
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
