"""
ont_sdk.cli.main
================

`ont-sdk`: query a node from the shell.

Examples
--------
    $ ont-sdk --rpc http://127.0.0.1:20336 height
    $ ont-sdk --rest http://127.0.0.1:20334 block --height 12
    $ ont-sdk tx 3f1e...c0
    $ ont-sdk events --height 12
    $ ont-sdk wait --timeout 30 --blocks 1
    $ ont-sdk store-key --contract 0200...01 6b6579
    $ ont-sdk verify-proof --key 6b --value 76 --proof a3... --root 9c...

Configuration
-------------
Endpoints come from `--rpc/--rest/--ws` or the ONT_RPC_URL, ONT_REST_URL and
ONT_WS_URL environment variables (see :class:`ont_sdk.config.SDKConfig`).
When several are set the manager prefers RPC, then REST, then WebSocket.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Optional

import typer

from ..client.manager import ClientManager
from ..config import SDKConfig
from ..errors import BlockWaitTimeout, OntSdkError
from ..layer2.client import layer2_store_key, verify_layer2_store_proof
from ..utils.bytes import from_hex, to_hex
from ..version import __version__ as SDK_VERSION

log = logging.getLogger(__name__)

app = typer.Typer(
    name="ont-sdk",
    help="Ontology node client: query blocks, transactions, events and layer-2 proofs.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main", "run"]


@dataclass
class Ctx:
    cfg: SDKConfig


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return to_hex(obj, prefix=False)
    if dataclasses.is_dataclass(obj):
        return dataclasses.asdict(obj)
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")


def _print_json(obj: Any) -> None:
    if dataclasses.is_dataclass(obj):
        obj = dataclasses.asdict(obj)
    elif isinstance(obj, list):
        obj = [dataclasses.asdict(o) if dataclasses.is_dataclass(o) else o for o in obj]
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False, default=_json_default))


def _hex_arg(value: str, name: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError as e:
        raise typer.BadParameter(f"{name}: {e}") from e


def _manager(ctx: typer.Context) -> ClientManager:
    c: Ctx = ctx.obj
    return ClientManager.from_config(c.cfg)


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(None, "--rpc", help="JSON-RPC endpoint URL."),
    rest: Optional[str] = typer.Option(None, "--rest", help="REST endpoint URL."),
    ws: Optional[str] = typer.Option(None, "--ws", help="WebSocket endpoint URL."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Resolve the effective configuration for this process."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    overrides: dict[str, Any] = {
        "rpc_url": rpc,
        "rest_url": rest,
        "ws_url": ws,
        "request_timeout": timeout,
    }
    if (rest or ws) and not rpc:
        # RPC outranks REST/WS; drop it so the endpoint given here is used
        overrides["rpc_url"] = ""
    ctx.obj = Ctx(cfg=SDKConfig.with_overrides(SDKConfig.from_env(), **overrides))


# --- Info --------------------------------------------------------------------


@app.command("version")
def version() -> None:
    """Print the SDK version."""
    typer.echo(f"ont-sdk {SDK_VERSION}")


@app.command("env")
def env(ctx: typer.Context) -> None:
    """Show the effective endpoints and timeouts."""
    c: Ctx = ctx.obj
    _print_json({**c.cfg.to_dict(), "sdk_version": SDK_VERSION})


# --- Chain queries -----------------------------------------------------------


@app.command("height")
def height(ctx: typer.Context) -> None:
    """Print the current block height."""
    with _manager(ctx) as mgr:
        typer.echo(str(mgr.get_current_block_height()))


@app.command("block")
def block(
    ctx: typer.Context,
    at_height: Optional[int] = typer.Option(None, "--height", "-n", help="Block height."),
    block_hash: Optional[str] = typer.Option(None, "--hash", help="Block hash (hex)."),
) -> None:
    """Fetch a block by height or hash. Exactly one of --height or --hash is required."""
    if (at_height is None) == (block_hash is None):
        raise typer.BadParameter("Provide exactly one of --height or --hash")
    with _manager(ctx) as mgr:
        if at_height is not None:
            res = mgr.get_block_by_height(at_height)
        else:
            res = mgr.get_block_by_hash(block_hash)
    _print_json(res)


@app.command("tx")
def tx(
    ctx: typer.Context,
    tx_hash: str = typer.Argument(..., help="Transaction hash (hex)"),
) -> None:
    """Look up a transaction by hash."""
    with _manager(ctx) as mgr:
        res = mgr.get_transaction(tx_hash)
    _print_json(res)


@app.command("events")
def events(
    ctx: typer.Context,
    tx_hash: Optional[str] = typer.Argument(None, help="Transaction hash (hex)"),
    at_height: Optional[int] = typer.Option(None, "--height", "-n", help="Block height."),
) -> None:
    """Contract events of one transaction, or of every transaction in a block."""
    if (at_height is None) == (tx_hash is None):
        raise typer.BadParameter("Provide exactly one of TX_HASH or --height")
    with _manager(ctx) as mgr:
        if at_height is not None:
            res: Any = mgr.get_smart_contract_event_by_block(at_height)
        else:
            res = mgr.get_smart_contract_event(tx_hash)
    _print_json(res)


@app.command("mempool-count")
def mempool_count(ctx: typer.Context) -> None:
    """Print verified/unverified transaction counts in the node's mempool."""
    with _manager(ctx) as mgr:
        res = mgr.get_mem_pool_tx_count()
    _print_json(res)


@app.command("wait")
def wait(
    ctx: typer.Context,
    timeout: int = typer.Option(30, "--timeout", "-t", help="Seconds to wait."),
    blocks: int = typer.Option(2, "--blocks", "-b", help="Blocks to wait for."),
) -> None:
    """Block until the chain has produced --blocks new blocks."""
    with _manager(ctx) as mgr:
        try:
            mgr.wait_for_generate_block(timeout, blocks)
        except BlockWaitTimeout as e:
            typer.echo(f"error: {e}", err=True)
            raise typer.Exit(code=2)
    typer.echo("ok")


# --- Layer-2 -----------------------------------------------------------------


@app.command("store-key")
def store_key(
    key: str = typer.Argument(..., help="Storage key (hex)"),
    contract: Optional[str] = typer.Option(None, "--contract", "-c", help="Contract address (hex)."),
) -> None:
    """Print the layer-2 state-tree key for KEY (under --contract if given)."""
    try:
        res = layer2_store_key(contract, _hex_arg(key, "key"))
    except ValueError as e:
        raise typer.BadParameter(f"contract: {e}") from e
    typer.echo(to_hex(res, prefix=False))


@app.command("verify-proof")
def verify_proof(
    key: str = typer.Option(..., "--key", help="State-tree key (hex)."),
    value: str = typer.Option(..., "--value", help="Expected value (hex)."),
    proof: str = typer.Option(..., "--proof", help="Encoded range proof (hex)."),
    root: str = typer.Option(..., "--root", help="State root (hex)."),
) -> None:
    """Verify a layer-2 store proof locally."""
    try:
        verify_layer2_store_proof(
            _hex_arg(key, "key"),
            _hex_arg(value, "value"),
            _hex_arg(proof, "proof"),
            _hex_arg(root, "root"),
        )
    except OntSdkError as e:
        typer.echo(f"invalid: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo("valid")


# --- Entrypoints --------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        rc = app(prog_name="ont-sdk", standalone_mode=False, args=argv)
    except typer.Exit as e:
        return int(e.exit_code)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        return 1
    return rc if isinstance(rc, int) else 0


def run(argv: Optional[list[str]] = None) -> int:
    """Alias for :func:`main`."""
    return main(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
