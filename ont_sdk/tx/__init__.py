"""
ont_sdk.tx
==========

Transaction helpers: the mutable builder and the canonical encoding.

Submodules
----------
- mutable: `MutableTransaction` and its conversion into an immutable `Transaction`.
- encode : canonical sign-bytes, hashing and CBOR (de)serialization.
"""

from __future__ import annotations

from . import encode as encode
from .mutable import MAX_SIG_ENTRIES, MutableTransaction, TxType

__all__ = ["encode", "MutableTransaction", "TxType", "MAX_SIG_ENTRIES"]
