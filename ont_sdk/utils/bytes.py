"""
Byte helpers shared by the transports and the layer-2 proof code.

Ontology nodes speak hex everywhere: hashes, addresses and storage keys are
sent as bare lowercase hex. Addresses are displayed reversed relative to their
storage order, hence :func:`reverse_bytes`. The varint encoders produce the
exact bytes the layer-2 state tree hashes (Go ``binary.PutUvarint`` /
``binary.PutVarint``).
"""
from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_U64 = 1 << 64
_I64_MIN, _I64_MAX = -(1 << 63), (1 << 63) - 1


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """Lowercase hex of *b*, ``0x``-prefixed unless ``prefix=False``."""
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Parse hex with or without a ``0x`` prefix.

    Raises TypeError for non-strings and ValueError for odd-length or
    non-hex input.
    """
    if not isinstance(s, str):
        raise TypeError(f"expected hex string, got {type(s).__name__}")
    body = s[2:] if s[:2] in ("0x", "0X") else s
    if len(body) % 2:
        raise ValueError(f"hex string has odd length {len(body)}")
    try:
        return bytes.fromhex(body)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def reverse_bytes(b: BytesLike) -> bytes:
    return bytes(b)[::-1]


# --- Varints ------------------------------------------------------------------


def uvarint_encode(n: int) -> bytes:
    """Unsigned 64-bit LEB128: 7 bits per byte, high bit set on all but the last."""
    if not 0 <= n < _U64:
        raise ValueError(f"uvarint out of range: {n}")
    out = bytearray()
    while n >= 0x80:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)


def varint_encode(n: int) -> bytes:
    """Signed 64-bit zig-zag varint: 0 -> 00, -1 -> 01, 1 -> 02."""
    if not _I64_MIN <= n <= _I64_MAX:
        raise ValueError(f"varint out of range: {n}")
    return uvarint_encode(((n << 1) ^ (n >> 63)) % _U64)


def encode_var_bytes(b: BytesLike) -> bytes:
    """uvarint(len(b)) || b"""
    raw = bytes(b)
    return uvarint_encode(len(raw)) + raw


__all__ = [
    "BytesLike",
    "to_hex",
    "from_hex",
    "reverse_bytes",
    "uvarint_encode",
    "varint_encode",
    "encode_var_bytes",
]
