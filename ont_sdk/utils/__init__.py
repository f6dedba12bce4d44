"""Hex, varint and hashing helpers."""

from .bytes import (encode_var_bytes, from_hex, reverse_bytes, to_hex,
                    uvarint_encode, varint_encode)
from .hash import sha256, sha256d

__all__ = [
    "to_hex",
    "from_hex",
    "reverse_bytes",
    "uvarint_encode",
    "varint_encode",
    "encode_var_bytes",
    "sha256",
    "sha256d",
]
