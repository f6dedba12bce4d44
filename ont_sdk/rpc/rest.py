from __future__ import annotations

"""
REST transport (sync), `/api/v1/...` routes.

- Uses httpx.
- Queries are GETs; transaction submission is a POST with an action envelope.
- REST has no correlation field on the wire; the qid is only logged and
  checked against the envelope when the node echoes one.

Example:
    from ont_sdk.rpc.rest import RestClient
    rest = RestClient("http://localhost:20334")
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import httpx

from ..client.base import Op, OntologyClient
from ..config import DEFAULT_REST_URL
from ..errors import ErrorCode, RpcError
from ..tx.encode import serialize_hex
from ..utils.bytes import to_hex
from ..version import user_agent
from .envelope import API_VERSION, unwrap

log = logging.getLogger(__name__)

Params = Mapping[str, Any]
Route = Tuple[str, Dict[str, Any]]  # (path, query)

_API = "/api/v1"


def _key_hex(p: Params) -> str:
    return to_hex(p["key"], prefix=False)


_ROUTES: Dict[Op, Callable[[Params], Route]] = {
    Op.CURRENT_BLOCK_HEIGHT: lambda p: (f"{_API}/block/height", {}),
    Op.BLOCK_BY_HEIGHT: lambda p: (f"{_API}/block/details/height/{p['height']}", {"raw": 0}),
    Op.BLOCK_BY_HASH: lambda p: (f"{_API}/block/details/hash/{p['hash']}", {"raw": 0}),
    Op.BLOCK_INFO_BY_HEIGHT: lambda p: (f"{_API}/block/details/height/{p['height']}", {"raw": 1}),
    Op.RAW_TRANSACTION: lambda p: (f"{_API}/transaction/{p['hash']}", {"raw": 0}),
    Op.BLOCK_HASH: lambda p: (f"{_API}/block/hash/{p['height']}", {}),
    Op.BLOCK_HEIGHT_BY_TX_HASH: lambda p: (f"{_API}/block/height/txhash/{p['hash']}", {}),
    Op.BLOCK_TX_HASHES_BY_HEIGHT: lambda p: (f"{_API}/block/transactions/height/{p['height']}", {}),
    Op.STORAGE: lambda p: (f"{_API}/storage/{p['address']}/{_key_hex(p)}", {}),
    Op.SMART_CONTRACT: lambda p: (f"{_API}/contract/{p['address']}", {}),
    Op.SMART_CONTRACT_EVENT: lambda p: (f"{_API}/smartcode/event/txhash/{p['hash']}", {}),
    Op.SMART_CONTRACT_EVENT_BY_BLOCK: lambda p: (
        f"{_API}/smartcode/event/transactions/{p['height']}",
        {},
    ),
    Op.MERKLE_PROOF: lambda p: (f"{_API}/merkleproof/{p['hash']}", {}),
    Op.CROSS_STATES_PROOF: lambda p: (f"{_API}/crossstatesproof/{p['height']}/{_key_hex(p)}", {}),
    Op.CROSS_CHAIN_MSG: lambda p: (f"{_API}/crosschainmsg/{p['height']}", {}),
    Op.MEM_POOL_TX_STATE: lambda p: (f"{_API}/mempool/txstate/{p['hash']}", {}),
    Op.MEM_POOL_TX_COUNT: lambda p: (f"{_API}/mempool/txcount", {}),
    Op.VERSION: lambda p: (f"{_API}/version", {}),
    Op.NETWORK_ID: lambda p: (f"{_API}/networkid", {}),
    Op.LAYER2_STORE_PROOF: lambda p: (f"{_API}/storeproof/{_key_hex(p)}", {}),
}


@dataclass
class RestClient(OntologyClient):
    """Synchronous client for the node's REST API."""

    url: str = DEFAULT_REST_URL
    timeout: float = 10.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.BaseTransport] = None
    _client: Optional[httpx.Client] = field(init=False, default=None, repr=False)

    kind = "rest"

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.Client(
            base_url=self.url.rstrip("/"),
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
        if op is Op.SEND_RAW_TRANSACTION:
            return self._send_raw_transaction(qid, params)
        if op is Op.CURRENT_BLOCK_HASH:
            # no dedicated route: resolve the tip height first
            height = json.loads(self.call(qid, Op.CURRENT_BLOCK_HEIGHT, {}))
            return self.call(qid, Op.BLOCK_HASH, {"height": height})
        route = _ROUTES.get(op)
        if route is None:
            raise RpcError(
                method=str(op), code=ErrorCode.INVALID_METHOD, message="unsupported operation"
            )
        path, query = route(params)
        return self._send(qid, op, "GET", path, params=query)

    # --- internals -------------------------------------------------------

    def _send_raw_transaction(self, qid: str, params: Params) -> bytes:
        body = {
            "Action": "sendrawtransaction",
            "Version": API_VERSION,
            "Data": serialize_hex(params["tx"]),
        }
        query = {"preExec": 1} if params.get("pre_exec") else {}
        return self._send(
            qid, Op.SEND_RAW_TRANSACTION, "POST", f"{_API}/transaction", params=query, json_body=body
        )

    def _send(
        self,
        qid: str,
        op: Op,
        http_method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        if self._client is None:
            raise RpcError(method=path, code=ErrorCode.NETWORK_ERROR, message="client closed")
        log.debug("rest -> %s %s qid=%s", http_method, path, qid)
        try:
            r = self._client.request(http_method, path, params=params or None, json=json_body)
        except httpx.HTTPError as e:
            raise RpcError(
                method=path,
                code=ErrorCode.NETWORK_ERROR,
                message="Network error",
                data=str(e),
                request_id=qid,
            ) from e
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                method=path,
                code=ErrorCode.MALFORMED_RESPONSE,
                message="Non-JSON response from REST",
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                request_id=qid,
                http_status=r.status_code,
            ) from e
        return unwrap(resp, op=op, qid=qid, method=path, http_status=r.status_code)


__all__ = ["RestClient"]
