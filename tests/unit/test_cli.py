from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

import ont_sdk.cli.main as cli_main
from ont_sdk.client import ClientManager, Op
from ont_sdk.layer2 import layer2_store_key

from tests.conftest import RecordingClient

runner = CliRunner()


@pytest.fixture
def node(monkeypatch) -> RecordingClient:
    client = RecordingClient()
    monkeypatch.setattr(cli_main, "_manager", lambda ctx: ClientManager(rpc=client))
    return client


def test_version():
    res = runner.invoke(cli_main.app, ["version"])
    assert res.exit_code == 0
    assert res.output.startswith("ont-sdk ")


def test_env_reflects_flags(monkeypatch):
    monkeypatch.delenv("ONT_RPC_URL", raising=False)
    res = runner.invoke(cli_main.app, ["--rest", "http://r:1", "--timeout", "3", "env"])
    assert res.exit_code == 0
    data = json.loads(res.output)
    assert data["rest_url"] == "http://r:1"
    assert data["rpc_url"] == ""
    assert data["request_timeout"] == 3.0


def test_height(node):
    node.reply_json(Op.CURRENT_BLOCK_HEIGHT, 1234)
    res = runner.invoke(cli_main.app, ["height"])
    assert res.exit_code == 0
    assert res.output.strip() == "1234"


def test_block_requires_one_selector(node):
    res = runner.invoke(cli_main.app, ["block"])
    assert res.exit_code != 0
    assert node.calls == []


def test_events_by_height_empty(node):
    node.reply(Op.SMART_CONTRACT_EVENT_BY_BLOCK, b'""')
    res = runner.invoke(cli_main.app, ["events", "--height", "4"])
    assert res.exit_code == 0
    assert json.loads(res.output) == []


def test_mempool_count(node):
    node.reply_json(Op.MEM_POOL_TX_COUNT, [1, 2])
    res = runner.invoke(cli_main.app, ["mempool-count"])
    assert json.loads(res.output) == {"verified": 1, "unverified": 2}


def test_wait_timeout_exit_code(node, monkeypatch):
    import ont_sdk.client.wait as wait_mod

    monkeypatch.setattr(wait_mod.time, "sleep", lambda s: None)
    node.reply_json(Op.CURRENT_BLOCK_HEIGHT, 5)
    res = runner.invoke(cli_main.app, ["wait", "--timeout", "2"])
    assert res.exit_code == 2


def test_store_key():
    contract = "01" * 19 + "02"
    res = runner.invoke(cli_main.app, ["store-key", "6b", "--contract", contract])
    assert res.exit_code == 0
    assert res.output.strip() == layer2_store_key(contract, b"k").hex()


def test_verify_proof(proofs):
    blob, root = proofs.single(b"key", b"value")
    args = ["verify-proof", "--key", b"key".hex(), "--value", b"value".hex(), "--proof", blob.hex(), "--root", root.hex()]
    res = runner.invoke(cli_main.app, args)
    assert res.exit_code == 0 and res.output.strip() == "valid"

    args[4] = b"other".hex()
    res = runner.invoke(cli_main.app, args)
    assert res.exit_code == 1


def test_main_returns_exit_code(node):
    node.reply_json(Op.VERSION, "x")
    assert cli_main.main(["version"]) == 0
    assert cli_main.main(["block", "--height", "1", "--hash", "aa"]) == 1
