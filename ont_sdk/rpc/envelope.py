"""
Response envelopes shared by the HTTP and WebSocket transports.

The node wraps every answer the same way, only the key casing differs:

    JSON-RPC : {"jsonrpc": "2.0", "id": qid, "error": 0, "desc": "SUCCESS", "result": ...}
    REST/WS  : {"Action": ..., "Id": qid, "Error": 0, "Desc": "SUCCESS", "Result": ..., "Version": "1.0.0"}

`unwrap()` checks the error code and hands back `result_bytes()` of the payload,
which is what the manager's decoders expect.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..client.base import Op
from ..errors import ErrorCode, RpcError
from ..utils.bytes import from_hex

API_VERSION = "1.0.0"


def result_bytes(op: Op, result: Any) -> bytes:
    """
    Re-encode a node result for the decoders.

    Block info is the one raw payload: the node sends hex, the caller wants the
    block bytes themselves.
    """
    if op is Op.BLOCK_INFO_BY_HEIGHT:
        if not isinstance(result, str):
            raise RpcError(
                method=op.value,
                code=ErrorCode.MALFORMED_RESPONSE,
                message="block info is not a hex string",
                data=result,
            )
        return from_hex(result)
    return json.dumps(result, separators=(",", ":")).encode("utf-8")


def unwrap(
    resp: Any,
    *,
    op: Op,
    qid: str,
    method: Optional[str] = None,
    http_status: Optional[int] = None,
) -> bytes:
    """Validate an envelope (either casing) and return the result bytes."""
    if not isinstance(resp, Mapping):
        raise RpcError(
            method=method or op.value,
            code=ErrorCode.MALFORMED_RESPONSE,
            message="Invalid response type",
            data=type(resp).__name__,
            request_id=qid,
            http_status=http_status,
        )
    rid = resp.get("id", resp.get("Id"))
    if rid not in (None, "") and str(rid) != qid:
        raise RpcError(
            method=method or op.value,
            code=ErrorCode.MALFORMED_RESPONSE,
            message=f"response id {rid!r} does not match request id",
            request_id=qid,
            http_status=http_status,
        )
    code = resp.get("error", resp.get("Error", 0))
    if code not in (0, None):
        raise RpcError(
            method=method or op.value,
            code=int(code),
            message=str(resp.get("desc", resp.get("Desc", "Unknown error"))),
            data=resp.get("result", resp.get("Result")),
            request_id=qid,
            http_status=http_status,
        )
    if "result" in resp:
        return result_bytes(op, resp["result"])
    if "Result" in resp:
        return result_bytes(op, resp["Result"])
    raise RpcError(
        method=method or op.value,
        code=ErrorCode.MALFORMED_RESPONSE,
        message="Malformed response: no result",
        data=dict(resp),
        request_id=qid,
        http_status=http_status,
    )


__all__ = ["API_VERSION", "result_bytes", "unwrap"]
