"""
ont_sdk.rpc
===========

Node transports. Each one implements `ont_sdk.client.base.OntologyClient`:

- http : `RpcClient`, JSON-RPC over HTTP (httpx)
- rest : `RestClient`, the `/api/v1` REST API (httpx)
- ws   : `WsClient`, the WebSocket API (websockets)
"""

from __future__ import annotations

from .http import RpcClient
from .rest import RestClient
from .ws import WsClient

__all__ = ["RpcClient", "RestClient", "WsClient"]
