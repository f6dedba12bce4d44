from __future__ import annotations

"""
WebSocket transport (sync) with request/response correlation.

- Uses the `websockets` package (threading client).
- Every frame carries the caller's qid as `Id`; responses are matched on it,
  so several threads can share one socket. Frames for other waiting callers
  are parked until their owner picks them up.
- Frames without an `Id` are node push notifications and go to `on_notify`.

Example:
    from ont_sdk.rpc.ws import WsClient

    with WsClient("ws://localhost:20335") as ws:
        raw = ws.call("7", Op.VERSION, {})
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Set, Tuple

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as ws_connect

from ..client.base import Op, OntologyClient
from ..config import DEFAULT_WS_URL
from ..errors import ErrorCode, RpcError
from ..tx.encode import serialize_hex
from ..utils.bytes import to_hex
from ..version import user_agent
from .envelope import API_VERSION, unwrap

log = logging.getLogger(__name__)

Params = Mapping[str, Any]
OnNotify = Callable[[Dict[str, Any]], None]


def _key_hex(p: Params) -> str:
    return to_hex(p["key"], prefix=False)


# op -> (action, extra frame fields)
_ACTIONS: Dict[Op, Callable[[Params], Tuple[str, Dict[str, Any]]]] = {
    Op.CURRENT_BLOCK_HEIGHT: lambda p: ("getblockheight", {}),
    Op.BLOCK_BY_HEIGHT: lambda p: ("getblockbyheight", {"Height": p["height"], "Raw": "0"}),
    Op.BLOCK_BY_HASH: lambda p: ("getblockbyhash", {"Hash": p["hash"], "Raw": "0"}),
    Op.BLOCK_INFO_BY_HEIGHT: lambda p: ("getblockbyheight", {"Height": p["height"], "Raw": "1"}),
    Op.RAW_TRANSACTION: lambda p: ("gettransaction", {"Hash": p["hash"], "Raw": "0"}),
    Op.BLOCK_HASH: lambda p: ("getblockhash", {"Height": p["height"]}),
    Op.BLOCK_HEIGHT_BY_TX_HASH: lambda p: ("getblockheightbytxhash", {"Hash": p["hash"]}),
    Op.BLOCK_TX_HASHES_BY_HEIGHT: lambda p: ("getblocktxsbyheight", {"Height": p["height"]}),
    Op.STORAGE: lambda p: ("getstorage", {"Hash": p["address"], "Key": _key_hex(p)}),
    Op.SMART_CONTRACT: lambda p: ("getcontract", {"Hash": p["address"], "Raw": "0"}),
    Op.SMART_CONTRACT_EVENT: lambda p: ("getsmartcodeeventbyhash", {"Hash": p["hash"]}),
    Op.SMART_CONTRACT_EVENT_BY_BLOCK: lambda p: ("getsmartcodeeventbyheight", {"Height": p["height"]}),
    Op.MERKLE_PROOF: lambda p: ("getmerkleproof", {"Hash": p["hash"]}),
    Op.CROSS_STATES_PROOF: lambda p: (
        "getcrossstatesproof",
        {"Height": p["height"], "Key": _key_hex(p)},
    ),
    Op.CROSS_CHAIN_MSG: lambda p: ("getcrosschainmsg", {"Height": p["height"]}),
    Op.MEM_POOL_TX_STATE: lambda p: ("getmempooltxstate", {"Hash": p["hash"]}),
    Op.MEM_POOL_TX_COUNT: lambda p: ("getmempooltxcount", {}),
    Op.VERSION: lambda p: ("getversion", {}),
    Op.NETWORK_ID: lambda p: ("getnetworkid", {}),
    Op.SEND_RAW_TRANSACTION: lambda p: (
        "sendrawtransaction",
        {"Data": serialize_hex(p["tx"]), "PreExec": "1" if p.get("pre_exec") else "0"},
    ),
    Op.LAYER2_STORE_PROOF: lambda p: ("getstoreproof", {"Key": _key_hex(p)}),
}


@dataclass
class WsClient(OntologyClient):
    url: str = DEFAULT_WS_URL
    connect_timeout: float = 10.0
    request_timeout: float = 10.0
    headers: Optional[Mapping[str, str]] = None
    on_notify: Optional[OnNotify] = None
    connector: Callable[..., Any] = ws_connect
    _ws: Any = field(init=False, default=None, repr=False)
    _send_lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)
    _recv_lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)
    _waiting: Set[str] = field(init=False, default_factory=set, repr=False)
    _parked: Dict[str, Dict[str, Any]] = field(init=False, default_factory=dict, repr=False)

    kind = "ws"

    # ------------- lifecycle -------------------

    def connect(self) -> None:
        """Open the socket if it is not open yet."""
        if self._ws is not None:
            return
        hdrs = {"User-Agent": user_agent()}
        if self.headers:
            hdrs.update(dict(self.headers))
        try:
            self._ws = self.connector(
                self.url, open_timeout=self.connect_timeout, additional_headers=hdrs
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            raise RpcError(
                method="connect", code=ErrorCode.NETWORK_ERROR, message="WS connect failed", data=str(e)
            ) from e
        log.debug("ws connected to %s", self.url)

    def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None:
            ws.close()
        self._parked.clear()

    def _drop_socket(self) -> None:
        """Close and forget a socket that failed mid-call; the next call reconnects."""
        ws, self._ws = self._ws, None
        if ws is None:
            return
        try:
            ws.close()
        except (OSError, WebSocketException) as e:
            log.debug("ws: close after failure raised %r", e)

    # ------------- RPC primitives --------------

    def call(self, qid: str, op: Op, params: Params) -> bytes:
        if op is Op.CURRENT_BLOCK_HASH:
            # no dedicated action: resolve the tip height first
            height = json.loads(self.call(qid, Op.CURRENT_BLOCK_HEIGHT, {}))
            return self.call(qid, Op.BLOCK_HASH, {"height": height})
        build = _ACTIONS.get(op)
        if build is None:
            raise RpcError(
                method=str(op), code=ErrorCode.INVALID_METHOD, message="unsupported operation"
            )
        action, fields = build(params)
        frame = {"Action": action, "Version": API_VERSION, "Id": qid, **fields}
        resp = self._roundtrip(qid, action, frame)
        return unwrap(resp, op=op, qid=qid, method=action)

    # ------------- internals --------------------

    def _roundtrip(self, qid: str, action: str, frame: Dict[str, Any]) -> Dict[str, Any]:
        with self._send_lock:
            self.connect()
            self._waiting.add(qid)
            try:
                self._ws.send(json.dumps(frame, separators=(",", ":")))
            except (ConnectionClosed, OSError) as e:
                self._waiting.discard(qid)
                self._drop_socket()
                raise RpcError(
                    method=action,
                    code=ErrorCode.NETWORK_ERROR,
                    message="WS send failed",
                    data=str(e),
                    request_id=qid,
                ) from e
        log.debug("ws -> %s id=%s", action, qid)

        deadline = time.monotonic() + self.request_timeout
        try:
            while True:
                with self._recv_lock:
                    parked = self._parked.pop(qid, None)
                    if parked is not None:
                        return parked
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise RpcError(
                            method=action,
                            code=ErrorCode.NETWORK_ERROR,
                            message="WS request timed out",
                            request_id=qid,
                        )
                    msg = self._recv(action, qid, remaining)
                    if msg is None:
                        continue
                    if str(msg.get("Id")) == qid:
                        return msg
                    self._route(msg)
        finally:
            self._waiting.discard(qid)

    def _recv(self, action: str, qid: str, timeout: float) -> Optional[Dict[str, Any]]:
        ws = self._ws
        if ws is None:
            raise RpcError(
                method=action, code=ErrorCode.NETWORK_ERROR, message="WS disconnected", request_id=qid
            )
        try:
            raw = ws.recv(timeout=timeout)
        except TimeoutError:
            return None
        except ConnectionClosed as e:
            self._drop_socket()
            raise RpcError(
                method=action,
                code=ErrorCode.NETWORK_ERROR,
                message="WS disconnected",
                data=str(e),
                request_id=qid,
            ) from e
        try:
            data = json.loads(raw)
        except ValueError:
            log.debug("ws: ignoring non-JSON frame")
            return None
        return data if isinstance(data, dict) else None

    def _route(self, msg: Dict[str, Any]) -> None:
        """Park a response for another waiter, or hand a push frame to on_notify."""
        rid = msg.get("Id")
        if rid not in (None, ""):
            if str(rid) in self._waiting:
                self._parked[str(rid)] = msg
            else:
                log.debug("ws: dropping response for unknown id %s", rid)
            return
        if self.on_notify is not None:
            try:
                self.on_notify(msg)
            except Exception:
                log.exception("ws notification handler failed")


__all__ = ["WsClient", "OnNotify"]
