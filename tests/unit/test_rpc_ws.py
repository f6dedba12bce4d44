from __future__ import annotations

import json
import queue
import threading

import pytest
from websockets.exceptions import ConnectionClosed

from ont_sdk.client import ClientManager, Op
from ont_sdk.errors import ErrorCode, RpcError
from ont_sdk.rpc.ws import WsClient

URL = "ws://node.test:20335"


def _ok(frame: dict, result) -> dict:
    return {"Action": frame["Action"], "Desc": "SUCCESS", "Error": 0, "Id": frame["Id"], "Result": result, "Version": "1.0.0"}


class FakeSocket:
    """Stands in for a websockets sync connection."""

    def __init__(self, answer=None, hold: int = 0):
        self.answer = answer or (lambda frame: _ok(frame, None))
        self.sent: list[dict] = []
        self.inbox: "queue.Queue[str]" = queue.Queue()
        self.closed = False
        self.hold = hold  # buffer this many replies, then release them newest first
        self._held: list[dict] = []
        self._lock = threading.Lock()

    def push(self, msg: dict) -> None:
        self.inbox.put(json.dumps(msg))

    def send(self, raw: str) -> None:
        frame = json.loads(raw)
        with self._lock:
            self.sent.append(frame)
            reply = self.answer(frame)
            if reply is None:
                return
            if self.hold:
                self._held.append(reply)
                if len(self._held) < self.hold:
                    return
                for r in reversed(self._held):
                    self.push(r)
                self._held.clear()
            else:
                self.push(reply)

    def recv(self, timeout=None) -> str:
        try:
            return self.inbox.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("no frame") from None

    def close(self) -> None:
        self.closed = True


class Connector:
    def __init__(self, sock: FakeSocket):
        self.sock = sock
        self.calls: list[tuple] = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.sock


def _client(sock: FakeSocket, **kw) -> WsClient:
    return WsClient(URL, connector=Connector(sock), **kw)


def test_version_frame_and_lazy_connect():
    sock = FakeSocket(lambda f: _ok(f, "1.11.0"))
    connector = Connector(sock)
    client = WsClient(URL, connector=connector, connect_timeout=3.0)
    assert connector.calls == []

    mgr = ClientManager(ws=client)
    assert mgr.get_version() == "1.11.0"
    assert sock.sent == [{"Action": "getversion", "Version": "1.0.0", "Id": "1"}]
    url, kwargs = connector.calls[0]
    assert url == URL
    assert kwargs["open_timeout"] == 3.0
    assert kwargs["additional_headers"]["User-Agent"].startswith("ont-sdk-python/")

    mgr.get_version()
    assert len(connector.calls) == 1


def test_current_hash_via_height():
    def answer(frame):
        if frame["Action"] == "getblockheight":
            return _ok(frame, 17)
        assert frame == {"Action": "getblockhash", "Version": "1.0.0", "Id": frame["Id"], "Height": 17}
        return _ok(frame, "ab" * 32)

    mgr = ClientManager(ws=_client(FakeSocket(answer)))
    assert mgr.get_current_block_hash() == "ab" * 32


def test_storage_and_send_fields():
    sock = FakeSocket(lambda f: _ok(f, "00"))
    client = _client(sock)
    client.call("4", Op.STORAGE, {"address": "01" * 20, "key": b"\x0a"})
    assert sock.sent[0]["Hash"] == "01" * 20
    assert sock.sent[0]["Key"] == "0a"
    client.call("5", Op.BLOCK_INFO_BY_HEIGHT, {"height": 2})
    assert sock.sent[1]["Raw"] == "1"


def test_push_frames_go_to_on_notify():
    seen = []
    sock = FakeSocket(lambda f: _ok(f, "v"))
    sock.push({"Action": "Notify", "Result": {"TxHash": "x"}})
    client = _client(sock, on_notify=seen.append)
    assert client.call("1", Op.VERSION, {}) == b'"v"'
    assert seen == [{"Action": "Notify", "Result": {"TxHash": "x"}}]


def test_stale_responses_are_dropped():
    sock = FakeSocket(lambda f: _ok(f, 3))
    sock.push({"Id": "old", "Error": 0, "Result": 1})
    client = _client(sock)
    assert client.call("2", Op.NETWORK_ID, {}) == b"3"
    assert client._parked == {}


def test_concurrent_callers_get_their_own_response():
    sock = FakeSocket(lambda f: _ok(f, f"answer-{f['Id']}"), hold=2)
    mgr = ClientManager(ws=_client(sock))
    results: dict[str, str] = {}

    def worker() -> None:
        results[threading.current_thread().name] = mgr.get_cross_chain_msg(1)

    threads = [threading.Thread(target=worker, name=f"t{i}") for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert sorted(results.values()) == ["answer-1", "answer-2"]
    by_qid = {f["Id"]: f for f in sock.sent}
    assert set(by_qid) == {"1", "2"}


def test_timeout():
    client = _client(FakeSocket(lambda f: None), request_timeout=0.05)
    with pytest.raises(RpcError, match="timed out") as ei:
        client.call("1", Op.VERSION, {})
    assert ei.value.code == ErrorCode.NETWORK_ERROR
    assert client._waiting == set()


def test_connect_failure():
    def refuse(url, **kwargs):
        raise OSError("connection refused")

    client = WsClient(URL, connector=refuse)
    with pytest.raises(RpcError, match="connect failed"):
        client.call("1", Op.VERSION, {})


def test_disconnect_resets_socket():
    class Closing(FakeSocket):
        def recv(self, timeout=None):
            raise ConnectionClosed(None, None)

    connector = Connector(Closing())
    client = WsClient(URL, connector=connector)
    with pytest.raises(RpcError, match="disconnected"):
        client.call("1", Op.VERSION, {})
    assert client._ws is None


def test_error_envelope():
    sock = FakeSocket(lambda f: {"Id": f["Id"], "Error": 42002, "Desc": "INVALID PARAMS", "Result": ""})
    with pytest.raises(RpcError) as ei:
        _client(sock).call("1", Op.BLOCK_HASH, {"height": -1})
    assert ei.value.code_enum is ErrorCode.INVALID_PARAMS


def test_close():
    sock = FakeSocket(lambda f: _ok(f, "v"))
    client = _client(sock)
    client.call("1", Op.VERSION, {})
    client.close()
    assert sock.closed


def test_send_failure_closes_socket_and_reconnects():
    class Broken(FakeSocket):
        def send(self, raw: str) -> None:
            raise OSError("broken pipe")

    broken, healthy = Broken(), FakeSocket(lambda f: _ok(f, "v"))
    sockets = iter([broken, healthy])
    client = WsClient(URL, connector=lambda url, **kw: next(sockets))

    with pytest.raises(RpcError, match="send failed"):
        client.call("1", Op.VERSION, {})
    assert broken.closed
    assert client._ws is None
    assert client._waiting == set()

    assert client.call("2", Op.VERSION, {}) == b'"v"'
    assert client._ws is healthy


def test_disconnect_closes_socket():
    class Closing(FakeSocket):
        def recv(self, timeout=None):
            raise ConnectionClosed(None, None)

    sock = Closing()
    client = _client(sock)
    with pytest.raises(RpcError, match="disconnected"):
        client.call("1", Op.VERSION, {})
    assert sock.closed
