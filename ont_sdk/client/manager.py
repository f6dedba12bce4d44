"""
ont_sdk.client.manager
======================

`ClientManager` owns the node transports and exposes the query/submit API.

Slots
-----
At most one transport lives in each of the RPC, REST and WS slots, plus an
optional pinned default. Every operation resolves its transport with
`get_client()`, which walks the slots in priority order::

    DEFAULT -> RPC -> REST -> WS

and takes the first one that is set. Nothing is retried and nothing falls back
to a lower-priority transport when a call fails.

Typical use
-----------
    from ont_sdk.client import ClientManager

    with ClientManager() as mgr:
        mgr.new_rpc_client("http://127.0.0.1:20336")
        print(mgr.get_current_block_height())
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import (TYPE_CHECKING, Any, Callable, Dict, List, Optional,
                    TypeVar)

from ..config import SDKConfig
from ..errors import NoClientError
from ..rpc.http import RpcClient
from ..rpc.rest import RestClient
from ..rpc.ws import WsClient
from ..types import decode
from ..types.core import (Address, Block, BlockTxHashes, CrossStatesProof,
                          DeployCode, Hash, MemPoolTxCount, MemPoolTxState,
                          MerkleProof, PreExecResult, SmartContractEvent,
                          Transaction)
from ..utils.bytes import BytesLike
from .base import OntologyClient, Op
from .qid import QidCounter
from .wait import Timeout, wait_for_generate_block

if TYPE_CHECKING:  # pragma: no cover
    from ..tx.mutable import MutableTransaction

log = logging.getLogger(__name__)

T = TypeVar("T")


class TransportSlot(Enum):
    """Transport slots in resolution order."""

    DEFAULT = "default"
    RPC = "rpc"
    REST = "rest"
    WS = "ws"


class ClientManager:
    """Transport registry plus the high-level node API."""

    def __init__(
        self,
        *,
        rpc: Optional[OntologyClient] = None,
        rest: Optional[OntologyClient] = None,
        ws: Optional[OntologyClient] = None,
        default: Optional[OntologyClient] = None,
        qids: Optional[QidCounter] = None,
    ) -> None:
        # insertion order is resolution order
        self._slots: Dict[TransportSlot, Optional[OntologyClient]] = {
            TransportSlot.DEFAULT: default,
            TransportSlot.RPC: rpc,
            TransportSlot.REST: rest,
            TransportSlot.WS: ws,
        }
        self._qids = qids if qids is not None else QidCounter()

    @classmethod
    def from_config(cls, cfg: Optional[SDKConfig] = None) -> "ClientManager":
        """Build a manager with one transport for each URL set in *cfg*."""
        cfg = cfg or SDKConfig.from_env()
        mgr = cls()
        if cfg.rpc_url:
            mgr.new_rpc_client(cfg.rpc_url, timeout=cfg.request_timeout, headers=cfg.http_headers())
        if cfg.rest_url:
            mgr.new_rest_client(cfg.rest_url, timeout=cfg.request_timeout, headers=cfg.http_headers())
        if cfg.ws_url:
            mgr.new_websocket_client(
                cfg.ws_url,
                connect_timeout=cfg.ws_connect_timeout,
                request_timeout=cfg.request_timeout,
                headers={"User-Agent": cfg.user_agent},
            )
        return mgr

    # --- Slots ---------------------------------------------------------------

    def _replace(self, slot: TransportSlot, client: Optional[OntologyClient]) -> None:
        old = self._slots.get(slot)
        self._slots[slot] = client
        if old is not None and old is not client:
            old.close()

    def new_rpc_client(self, url: Optional[str] = None, **kwargs: Any) -> RpcClient:
        client = RpcClient(url, **kwargs) if url else RpcClient(**kwargs)
        self._replace(TransportSlot.RPC, client)
        return client

    def get_rpc_client(self) -> Optional[OntologyClient]:
        return self._slots[TransportSlot.RPC]

    def new_rest_client(self, url: Optional[str] = None, **kwargs: Any) -> RestClient:
        client = RestClient(url, **kwargs) if url else RestClient(**kwargs)
        self._replace(TransportSlot.REST, client)
        return client

    def get_rest_client(self) -> Optional[OntologyClient]:
        return self._slots[TransportSlot.REST]

    def new_websocket_client(self, url: Optional[str] = None, **kwargs: Any) -> WsClient:
        client = WsClient(url, **kwargs) if url else WsClient(**kwargs)
        self._replace(TransportSlot.WS, client)
        return client

    def get_websocket_client(self) -> Optional[OntologyClient]:
        return self._slots[TransportSlot.WS]

    def set_default_client(self, client: Optional[OntologyClient]) -> None:
        """Pin *client* ahead of every slot; ``None`` clears the pin."""
        self._slots[TransportSlot.DEFAULT] = client

    def get_client(self) -> Optional[OntologyClient]:
        """First configured transport in DEFAULT, RPC, REST, WS order, or None."""
        for client in self._slots.values():
            if client is not None:
                return client
        return None

    def get_next_qid(self) -> str:
        return self._qids.next()

    @property
    def qids(self) -> QidCounter:
        return self._qids

    def close(self) -> None:
        """Close the RPC/REST/WS transports. A pinned default is left to its owner."""
        for slot in (TransportSlot.RPC, TransportSlot.REST, TransportSlot.WS):
            client = self._slots[slot]
            if client is not None:
                client.close()

    def __enter__(self) -> "ClientManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    # --- Dispatch ------------------------------------------------------------

    def _require_client(self) -> OntologyClient:
        client = self.get_client()
        if client is None:
            raise NoClientError()
        return client

    def call(self, op: Op, **params: Any) -> bytes:
        """Resolve a transport and issue *op* with a fresh qid; return raw bytes."""
        return self._call_with(self._require_client(), op, params)

    def _call_with(self, client: OntologyClient, op: Op, params: Dict[str, Any]) -> bytes:
        qid = self.get_next_qid()
        log.debug("%s via %s qid=%s", op.value, client.kind, qid)
        return client.call(qid, op, params)

    def _query(self, op: Op, decoder: Callable[[bytes], T], **params: Any) -> T:
        return decoder(self.call(op, **params))

    # --- Chain queries -------------------------------------------------------

    def get_current_block_height(self) -> int:
        return self._query(Op.CURRENT_BLOCK_HEIGHT, decode.get_uint32)

    def get_current_block_hash(self) -> Hash:
        return self._query(Op.CURRENT_BLOCK_HASH, decode.get_uint256)

    def get_block_by_height(self, height: int) -> Block:
        return self._query(Op.BLOCK_BY_HEIGHT, decode.get_block, height=int(height))

    def get_block_by_hash(self, block_hash: Hash) -> Block:
        return self._query(Op.BLOCK_BY_HASH, decode.get_block, hash=block_hash)

    def get_block_info_by_height(self, height: int) -> bytes:
        """Serialized block as the node stores it; not decoded."""
        return self.call(Op.BLOCK_INFO_BY_HEIGHT, height=int(height))

    def get_transaction(self, tx_hash: Hash) -> Transaction:
        return self._query(Op.RAW_TRANSACTION, decode.get_transaction, hash=tx_hash)

    def get_block_hash(self, height: int) -> Hash:
        return self._query(Op.BLOCK_HASH, decode.get_uint256, height=int(height))

    def get_block_height_by_tx_hash(self, tx_hash: Hash) -> int:
        return self._query(Op.BLOCK_HEIGHT_BY_TX_HASH, decode.get_uint32, hash=tx_hash)

    def get_block_tx_hashes_by_height(self, height: int) -> BlockTxHashes:
        return self._query(
            Op.BLOCK_TX_HASHES_BY_HEIGHT, decode.get_block_tx_hashes, height=int(height)
        )

    def get_storage(self, contract_address: Address, key: BytesLike) -> bytes:
        return self._query(
            Op.STORAGE, decode.get_storage, address=contract_address, key=bytes(key)
        )

    def get_smart_contract(self, contract_address: Address) -> DeployCode:
        return self._query(Op.SMART_CONTRACT, decode.get_smart_contract, address=contract_address)

    def get_smart_contract_event(self, tx_hash: Hash) -> SmartContractEvent:
        return self._query(Op.SMART_CONTRACT_EVENT, decode.get_smart_contract_event, hash=tx_hash)

    def get_smart_contract_event_by_block(self, height: int) -> List[SmartContractEvent]:
        data = self.call(Op.SMART_CONTRACT_EVENT_BY_BLOCK, height=int(height))
        if data is None or bytes(data) in decode.EMPTY_EVENT_PAYLOADS:
            return []
        return decode.get_smart_contract_events(data)

    def get_merkle_proof(self, tx_hash: Hash) -> MerkleProof:
        return self._query(Op.MERKLE_PROOF, decode.get_merkle_proof, hash=tx_hash)

    def get_cross_states_proof(self, height: int, key: BytesLike) -> CrossStatesProof:
        return self._query(
            Op.CROSS_STATES_PROOF, decode.get_cross_states_proof, height=int(height), key=bytes(key)
        )

    def get_cross_chain_msg(self, height: int) -> str:
        return self._query(Op.CROSS_CHAIN_MSG, decode.get_cross_chain_msg, height=int(height))

    def get_mem_pool_tx_state(self, tx_hash: Hash) -> MemPoolTxState:
        return self._query(Op.MEM_POOL_TX_STATE, decode.get_mem_pool_tx_state, hash=tx_hash)

    def get_mem_pool_tx_count(self) -> MemPoolTxCount:
        return self._query(Op.MEM_POOL_TX_COUNT, decode.get_mem_pool_tx_count)

    def get_version(self) -> str:
        return self._query(Op.VERSION, decode.get_version)

    def get_network_id(self) -> int:
        return self._query(Op.NETWORK_ID, decode.get_uint32)

    # --- Submission ----------------------------------------------------------

    def _submit(self, mut_tx: "MutableTransaction", pre_exec: bool) -> bytes:
        client = self._require_client()
        tx = mut_tx.into_immutable()
        return self._call_with(client, Op.SEND_RAW_TRANSACTION, {"tx": tx, "pre_exec": pre_exec})

    def send_transaction(self, mut_tx: "MutableTransaction") -> Hash:
        """Finalize and broadcast *mut_tx*; returns the hash the node reports."""
        return decode.get_uint256(self._submit(mut_tx, pre_exec=False))

    def pre_exec_transaction(self, mut_tx: "MutableTransaction") -> PreExecResult:
        """Simulate *mut_tx* on the node without committing it."""
        return decode.get_pre_exec_result(self._submit(mut_tx, pre_exec=True))

    # --- Waiting -------------------------------------------------------------

    def wait_for_generate_block(self, timeout: Timeout, block_count: Optional[int] = None) -> bool:
        return wait_for_generate_block(self, timeout, block_count)


__all__ = ["ClientManager", "TransportSlot"]
