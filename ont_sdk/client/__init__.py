"""
ont_sdk.client
==============

Transport contract, correlation ids and the `ClientManager` built on them.

Submodules
----------
- base    : `Op` and the `OntologyClient` interface every transport implements.
- qid     : `QidCounter`, the thread-safe request id source.
- manager : `ClientManager` and `TransportSlot`.
- wait    : `wait_for_generate_block`.
"""

from __future__ import annotations

from .base import OntologyClient, Op
from .qid import QidCounter
from .manager import ClientManager, TransportSlot
from .wait import wait_for_generate_block

__all__ = [
    "Op",
    "OntologyClient",
    "QidCounter",
    "ClientManager",
    "TransportSlot",
    "wait_for_generate_block",
]
