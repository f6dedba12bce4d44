from __future__ import annotations

import json

import httpx
import pytest

from ont_sdk.client import ClientManager, Op
from ont_sdk.errors import ErrorCode, RpcError
from ont_sdk.rpc.http import RpcClient
from ont_sdk.tx import MutableTransaction, TxType, encode

URL = "http://node.test:20336"


class _Node:
    """Fake JSON-RPC node: maps method -> result (or a full envelope via callable)."""

    def __init__(self, results):
        self.results = results
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        res = self.results[body["method"]]
        if callable(res):
            return res(body)
        return httpx.Response(
            200, json={"desc": "SUCCESS", "error": 0, "id": body["id"], "jsonrpc": "2.0", "result": res}
        )


def _client(node: _Node) -> RpcClient:
    return RpcClient(URL, transport=httpx.MockTransport(node))


def test_height_is_block_count_minus_one():
    node = _Node({"getblockcount": 101})
    mgr = ClientManager(rpc=_client(node))
    assert mgr.get_current_block_height() == 100
    req = node.requests[0]
    assert req == {"jsonrpc": "2.0", "method": "getblockcount", "params": [], "id": "1"}


def test_param_shapes():
    node = _Node(
        {
            "getblockhash": "aa" * 32,
            "getstorage": "0102",
            "getcontractstate": {"Code": "", "VmType": 3, "Name": "c"},
            "getcrossstatesproof": {"Type": "CrossStatesProof", "AuditPath": "00"},
            "getsmartcodeevent": None,
        }
    )
    mgr = ClientManager(rpc=_client(node))
    assert mgr.get_block_hash(5) == "aa" * 32
    assert mgr.get_storage("01" * 20, b"\xab") == b"\x01\x02"
    assert mgr.get_smart_contract("01" * 20).vm_type == 3
    mgr.get_cross_states_proof(9, b"\x0f")
    assert mgr.get_smart_contract_event_by_block(4) == []
    assert [r["params"] for r in node.requests] == [
        [5],
        ["01" * 20, "ab"],
        ["01" * 20, 1],
        [9, "0f"],
        [4],
    ]


def test_block_info_hex_is_decoded_to_bytes():
    node = _Node({"getblock": "00aabb"})
    mgr = ClientManager(rpc=_client(node))
    assert mgr.get_block_info_by_height(3) == b"\x00\xaa\xbb"
    assert node.requests[0]["params"] == [3]


def test_send_and_pre_exec():
    sent_hash = "cd" * 32
    node = _Node(
        {
            "sendrawtransaction": lambda body: httpx.Response(
                200,
                json={
                    "error": 0,
                    "id": body["id"],
                    "result": {"State": 1, "Gas": 20000, "Result": "00"} if len(body["params"]) == 2 else sent_hash,
                },
            )
        }
    )
    mgr = ClientManager(rpc=_client(node))
    mtx = MutableTransaction(tx_type=TxType.INVOKE_NEO, payload=b"\x51", payer="A", nonce=1)
    mtx.add_sig(pub_keys=["02aa"], m=1, sig_data=["bb"])

    assert mgr.send_transaction(mtx) == sent_hash
    assert mgr.pre_exec_transaction(mtx).gas == 20000
    raw = encode.serialize_hex(mtx.into_immutable())
    assert node.requests[0]["params"] == [raw]
    assert node.requests[1]["params"] == [raw, 1]


def test_node_error_becomes_rpc_error():
    node = _Node(
        {
            "getblockhash": lambda body: httpx.Response(
                200, json={"error": 44003, "desc": "UNKNOWN BLOCK", "id": body["id"], "result": ""}
            )
        }
    )
    with pytest.raises(RpcError) as ei:
        _client(node).call("7", Op.BLOCK_HASH, {"height": 10**6})
    err = ei.value
    assert err.code == 44003
    assert err.code_enum is ErrorCode.UNKNOWN_BLOCK
    assert err.message == "UNKNOWN BLOCK"
    assert err.request_id == "7"


def test_mismatched_response_id():
    node = _Node({"getversion": lambda body: httpx.Response(200, json={"error": 0, "id": "999", "result": "1"})})
    with pytest.raises(RpcError, match="does not match"):
        _client(node).call("1", Op.VERSION, {})


def test_non_json_reply():
    node = _Node({"getversion": lambda body: httpx.Response(502, text="<html>bad gateway</html>")})
    with pytest.raises(RpcError) as ei:
        _client(node).call("1", Op.VERSION, {})
    assert ei.value.code == ErrorCode.MALFORMED_RESPONSE
    assert ei.value.http_status == 502


def test_network_error_is_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    client = RpcClient(URL, transport=httpx.MockTransport(handler))
    with pytest.raises(RpcError) as ei:
        client.call("1", Op.VERSION, {})
    assert ei.value.code == ErrorCode.NETWORK_ERROR
    assert len(attempts) == 1


def test_closed_client():
    client = _client(_Node({}))
    client.close()
    with pytest.raises(RpcError, match="client closed"):
        client.call("1", Op.VERSION, {})


def test_user_agent_header():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers["user-agent"]
        return httpx.Response(200, json={"error": 0, "result": "1.0"})

    RpcClient(URL, transport=httpx.MockTransport(handler)).call("1", Op.VERSION, {})
    assert seen["ua"].startswith("ont-sdk-python/")
