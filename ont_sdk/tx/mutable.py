"""
ont_sdk.tx.mutable
==================

`MutableTransaction` is the editable form callers build and sign; the manager
converts it into an immutable `Transaction` before submission.

Typical flow
------------
    from ont_sdk.tx import MutableTransaction, TxType

    mtx = MutableTransaction(tx_type=TxType.INVOKE_NEO, payload=code, payer=addr,
                             gas_price=2500, gas_limit=20000)
    sig = signer.sign(mtx.sign_bytes())            # signing lives outside the SDK
    mtx.add_sig(pub_keys=[pk_hex], m=1, sig_data=[sig.hex()])
    tx = mtx.into_immutable()
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional, Sequence

from ..errors import TxError
from ..types.core import Address, Hash, Hex, Sig, Transaction
from . import encode

_UINT32_MAX = 0xFFFFFFFF
_UINT64_MAX = 0xFFFFFFFFFFFFFFFF

# Upper bound on signature entries accepted by the node
MAX_SIG_ENTRIES = 16


class TxType(IntEnum):
    DEPLOY = 0xD0
    INVOKE_NEO = 0xD1
    INVOKE_WASM = 0xD2


def _random_nonce() -> int:
    return secrets.randbits(32)


@dataclass
class MutableTransaction:
    tx_type: int
    payload: bytes = b""
    payer: Optional[Address] = None
    nonce: int = field(default_factory=_random_nonce)
    gas_price: int = 0
    gas_limit: int = 20_000
    version: int = 0
    attributes: List[Any] = field(default_factory=list)
    sigs: List[Sig] = field(default_factory=list)

    def sign_bytes(self) -> bytes:
        return encode.sign_bytes(self)

    def hash(self) -> Hash:
        return encode.tx_hash(self)

    def add_sig(self, *, pub_keys: Sequence[Hex], m: int, sig_data: Sequence[Hex]) -> None:
        self.sigs.append(Sig(pub_keys=tuple(pub_keys), m=int(m), sig_data=tuple(sig_data)))

    def into_immutable(self) -> Transaction:
        """
        Validate and freeze. Raises TxError if the payer or any required
        signature data is missing or out of range.
        """
        if not self.payer:
            raise TxError("transaction has no payer", field="payer")
        if not 0 <= int(self.nonce) <= _UINT32_MAX:
            raise TxError(f"nonce {self.nonce} out of uint32 range", field="nonce")
        for name in ("gas_price", "gas_limit"):
            if not 0 <= int(getattr(self, name)) <= _UINT64_MAX:
                raise TxError(f"{name} out of uint64 range", field=name)
        if not self.sigs:
            raise TxError("transaction is not signed", field="sigs")
        if len(self.sigs) > MAX_SIG_ENTRIES:
            raise TxError(f"too many signature entries ({len(self.sigs)})", field="sigs")
        for i, sig in enumerate(self.sigs):
            if not sig.pub_keys:
                raise TxError(f"sigs[{i}] has no public keys", field="sigs")
            if not 1 <= sig.m <= len(sig.pub_keys):
                raise TxError(f"sigs[{i}] threshold m={sig.m} invalid", field="sigs")
            if len(sig.sig_data) < sig.m:
                raise TxError(
                    f"sigs[{i}] has {len(sig.sig_data)} signatures, needs {sig.m}",
                    field="sigs",
                )

        return Transaction(
            version=int(self.version),
            tx_type=int(self.tx_type),
            nonce=int(self.nonce),
            gas_price=int(self.gas_price),
            gas_limit=int(self.gas_limit),
            payer=self.payer,
            payload=bytes(self.payload),
            attributes=tuple(self.attributes),
            sigs=tuple(self.sigs),
            hash=self.hash(),
        )


__all__ = ["TxType", "MutableTransaction", "MAX_SIG_ENTRIES"]
