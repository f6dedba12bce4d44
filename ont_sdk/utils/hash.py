from __future__ import annotations

import hashlib

from .bytes import BytesLike, to_hex


# --- SHA-256 ------------------------------------------------------------------
# Transaction hashes are double SHA-256; range-proof nodes use single SHA-256.

def sha256(data: BytesLike) -> bytes:
    """Return SHA-256 digest of *data*."""
    return hashlib.sha256(bytes(data)).digest()


def sha256d(data: BytesLike) -> bytes:
    """Return sha256(sha256(data)), the transaction/block hash function."""
    return hashlib.sha256(hashlib.sha256(bytes(data)).digest()).digest()


def sha256_hex(data: BytesLike, *, prefix: bool = False) -> str:
    return to_hex(sha256(data), prefix=prefix)


__all__ = ["sha256", "sha256d", "sha256_hex"]
