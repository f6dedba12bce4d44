from __future__ import annotations

"""
HTTP JSON-RPC transport (sync).

- Uses httpx.
- One POST per call; the correlation id travels as the JSON-RPC `id`.
- No retries: a failed call raises RpcError and control returns to the caller.

Example:
    from ont_sdk.rpc.http import RpcClient
    from ont_sdk.client.base import Op

    with RpcClient("http://localhost:20336") as rpc:
        raw = rpc.call("1", Op.CURRENT_BLOCK_HEIGHT, {})
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from ..client.base import Op, OntologyClient
from ..config import DEFAULT_RPC_URL
from ..errors import ErrorCode, RpcError
from ..tx.encode import serialize_hex
from ..utils.bytes import to_hex
from ..version import user_agent
from .envelope import unwrap

log = logging.getLogger(__name__)

Params = Mapping[str, Any]


def _key_hex(p: Params) -> str:
    return to_hex(p["key"], prefix=False)


def _send_params(p: Params) -> List[Any]:
    args: List[Any] = [serialize_hex(p["tx"])]
    if p.get("pre_exec"):
        args.append(1)
    return args


# op -> (method, positional params builder)
_METHODS: Dict[Op, tuple[str, Callable[[Params], List[Any]]]] = {
    Op.CURRENT_BLOCK_HEIGHT: ("getblockcount", lambda p: []),
    Op.CURRENT_BLOCK_HASH: ("getbestblockhash", lambda p: []),
    Op.BLOCK_BY_HEIGHT: ("getblock", lambda p: [p["height"], 1]),
    Op.BLOCK_BY_HASH: ("getblock", lambda p: [p["hash"], 1]),
    Op.BLOCK_INFO_BY_HEIGHT: ("getblock", lambda p: [p["height"]]),
    Op.RAW_TRANSACTION: ("getrawtransaction", lambda p: [p["hash"], 1]),
    Op.BLOCK_HASH: ("getblockhash", lambda p: [p["height"]]),
    Op.BLOCK_HEIGHT_BY_TX_HASH: ("getblockheightbytxhash", lambda p: [p["hash"]]),
    Op.BLOCK_TX_HASHES_BY_HEIGHT: ("getblocktxsbyheight", lambda p: [p["height"]]),
    Op.STORAGE: ("getstorage", lambda p: [p["address"], _key_hex(p)]),
    Op.SMART_CONTRACT: ("getcontractstate", lambda p: [p["address"], 1]),
    Op.SMART_CONTRACT_EVENT: ("getsmartcodeevent", lambda p: [p["hash"]]),
    Op.SMART_CONTRACT_EVENT_BY_BLOCK: ("getsmartcodeevent", lambda p: [p["height"]]),
    Op.MERKLE_PROOF: ("getmerkleproof", lambda p: [p["hash"]]),
    Op.CROSS_STATES_PROOF: ("getcrossstatesproof", lambda p: [p["height"], _key_hex(p)]),
    Op.CROSS_CHAIN_MSG: ("getcrosschainmsg", lambda p: [p["height"]]),
    Op.MEM_POOL_TX_STATE: ("getmempooltxstate", lambda p: [p["hash"]]),
    Op.MEM_POOL_TX_COUNT: ("getmempooltxcount", lambda p: []),
    Op.VERSION: ("getversion", lambda p: []),
    Op.NETWORK_ID: ("getnetworkid", lambda p: []),
    Op.SEND_RAW_TRANSACTION: ("sendrawtransaction", _send_params),
    Op.LAYER2_STORE_PROOF: ("getstoreproof", lambda p: [_key_hex(p)]),
}


@dataclass
class RpcClient(OntologyClient):
    """Synchronous JSON-RPC 2.0 client over HTTP."""

    url: str = DEFAULT_RPC_URL
    timeout: float = 10.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.BaseTransport] = None
    _client: Optional[httpx.Client] = field(init=False, default=None, repr=False)

    kind = "rpc"

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.Client(
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # --- public API ------------------------------------------------------

    def call(self, qid: str, op: Op, params: Params) -> bytes:
        try:
            method, build = _METHODS[op]
        except KeyError:
            raise RpcError(
                method=str(op), code=ErrorCode.INVALID_METHOD, message="unsupported operation"
            ) from None
        data = self.request(method, build(params), qid=qid, op=op)
        if op is Op.CURRENT_BLOCK_HEIGHT:
            # getblockcount counts the genesis block
            count = json.loads(data)
            if not isinstance(count, int) or count < 1:
                raise RpcError(
                    method=method,
                    code=ErrorCode.MALFORMED_RESPONSE,
                    message="invalid block count",
                    data=count,
                    request_id=qid,
                )
            return str(count - 1).encode()
        return data

    def request(self, method: str, params: List[Any], *, qid: str, op: Op) -> bytes:
        """Perform a single JSON-RPC request and return the result bytes or raise RpcError."""
        if self._client is None:
            raise RpcError(method=method, code=ErrorCode.NETWORK_ERROR, message="client closed")
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": qid}
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        log.debug("rpc -> %s id=%s", method, qid)
        try:
            r = self._client.post(self.url, content=body)
        except httpx.HTTPError as e:
            raise RpcError(
                method=method,
                code=ErrorCode.NETWORK_ERROR,
                message="Network error",
                data=str(e),
                request_id=qid,
            ) from e
        # Avoid raise_for_status() to keep the error body visible below
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                method=method,
                code=ErrorCode.MALFORMED_RESPONSE,
                message="Non-JSON response from RPC",
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                request_id=qid,
                http_status=r.status_code,
            ) from e
        return unwrap(resp, op=op, qid=qid, method=method, http_status=r.status_code)


__all__ = ["RpcClient"]
