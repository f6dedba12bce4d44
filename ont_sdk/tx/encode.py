"""
ont_sdk.tx.encode
=================

Deterministic CBOR encoding for transactions.

This module provides:
- `canonical_body_dict(tx)` -> the signable view of a transaction (no sigs)
- `sign_bytes(tx)` -> bytes to sign (canonical CBOR of the body)
- `tx_hash(tx)` -> sha256d of the sign bytes, hex in node byte order
- `serialize(tx)` / `serialize_hex(tx)` -> raw signed blob ready for submission
- `deserialize(raw)` -> `Transaction`

Design notes
------------
* Canonical CBOR comes from `cbor2` (``canonical=True``), which sorts map keys
  by their encoded bytes and uses minimal integer widths.
* The wire envelope is ``{"body": {...}, "sigs": [{"pubKeys", "m", "sigData"}]}``
  with binary fields as CBOR byte strings.
* Both `Transaction` and `MutableTransaction` are accepted; fields are read by
  attribute.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Union

import cbor2

from ..errors import TxError
from ..types.core import Hash, Sig, Transaction
from ..utils.bytes import from_hex, reverse_bytes, to_hex
from ..utils.hash import sha256d

TxLike = Any  # Transaction or MutableTransaction


# -----------------------------------------------------------------------------
# Canonical body (SignBytes source)
# -----------------------------------------------------------------------------

def canonical_body_dict(tx: TxLike) -> Dict[str, Any]:
    return {
        "version": int(tx.version),
        "txType": int(tx.tx_type),
        "nonce": int(tx.nonce),
        "gasPrice": int(tx.gas_price),
        "gasLimit": int(tx.gas_limit),
        "payer": tx.payer or "",
        "payload": bytes(tx.payload),
        "attributes": list(tx.attributes),
    }


def sign_bytes(tx: TxLike) -> bytes:
    """Bytes a signer must sign for *tx*."""
    try:
        return cbor2.dumps(canonical_body_dict(tx), canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise TxError(f"cannot encode transaction body: {e}") from e


def tx_hash(tx: TxLike) -> Hash:
    """Transaction hash as the node prints it (reversed sha256d, no 0x)."""
    return to_hex(reverse_bytes(sha256d(sign_bytes(tx))), prefix=False)


# -----------------------------------------------------------------------------
# Signed envelope
# -----------------------------------------------------------------------------

def _sig_to_cbor(sig: Sig) -> Dict[str, Any]:
    return {
        "pubKeys": [from_hex(pk) for pk in sig.pub_keys],
        "m": int(sig.m),
        "sigData": [from_hex(s) for s in sig.sig_data],
    }


def _sig_from_cbor(obj: Dict[str, Any]) -> Sig:
    return Sig(
        pub_keys=tuple(to_hex(pk, prefix=False) for pk in obj.get("pubKeys", [])),
        m=int(obj.get("m", 0)),
        sig_data=tuple(to_hex(s, prefix=False) for s in obj.get("sigData", [])),
    )


def serialize(tx: Transaction) -> bytes:
    """Encode a finalized transaction into its raw CBOR wire form."""
    envelope = {
        "body": canonical_body_dict(tx),
        "sigs": [_sig_to_cbor(s) for s in tx.sigs],
    }
    try:
        return cbor2.dumps(envelope, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise TxError(f"cannot encode transaction: {e}") from e


def serialize_hex(tx: Transaction) -> str:
    return to_hex(serialize(tx), prefix=False)


def deserialize(raw: Union[bytes, bytearray, memoryview]) -> Transaction:
    """Inverse of `serialize`; the hash is recomputed from the body."""
    try:
        env = cbor2.loads(bytes(raw))
        body = env["body"]
        sigs: List[Sig] = [_sig_from_cbor(s) for s in env.get("sigs", [])]
        tx = Transaction(
            version=int(body["version"]),
            tx_type=int(body["txType"]),
            nonce=int(body["nonce"]),
            gas_price=int(body["gasPrice"]),
            gas_limit=int(body["gasLimit"]),
            payer=body["payer"],
            payload=bytes(body["payload"]),
            attributes=tuple(body.get("attributes", [])),
            sigs=tuple(sigs),
        )
    except (cbor2.CBORDecodeError, KeyError, TypeError, ValueError) as e:
        raise TxError(f"cannot decode transaction: {e}") from e
    return replace(tx, hash=tx_hash(tx))


__all__ = [
    "canonical_body_dict",
    "sign_bytes",
    "tx_hash",
    "serialize",
    "serialize_hex",
    "deserialize",
]
