from __future__ import annotations

import hashlib
import importlib

import pytest

from ont_sdk.utils import (encode_var_bytes, from_hex, reverse_bytes, sha256,
                           sha256d, to_hex, uvarint_encode, varint_encode)
from ont_sdk.utils.hash import sha256_hex


def test_package_imports_cleanly():
    pkg = importlib.import_module("ont_sdk")
    for name in pkg.__all__:
        assert getattr(pkg, name) is not None


@pytest.mark.parametrize("data", [b"abc", bytearray(b"abc"), memoryview(b"abc")])
def test_hashes_accept_any_bytes_like(data):
    assert sha256(data) == hashlib.sha256(b"abc").digest()
    assert sha256d(data) == hashlib.sha256(hashlib.sha256(b"abc").digest()).digest()
    assert sha256_hex(data) == hashlib.sha256(b"abc").hexdigest()


def test_hex_helpers():
    assert to_hex(b"\x01\xab") == "0x01ab"
    assert to_hex(b"\x01\xab", prefix=False) == "01ab"
    assert from_hex("0x01AB") == from_hex("01ab") == b"\x01\xab"
    assert reverse_bytes(b"\x01\x02\x03") == b"\x03\x02\x01"
    with pytest.raises(ValueError):
        from_hex("abc")
    with pytest.raises(ValueError):
        from_hex("zz")
    with pytest.raises(TypeError):
        from_hex(b"ab")  # type: ignore[arg-type]


def test_varints():
    assert uvarint_encode(0) == b"\x00"
    assert uvarint_encode(300) == b"\xac\x02"
    assert [varint_encode(n) for n in (0, -1, 1, -64, 64)] == [b"\x00", b"\x01", b"\x02", b"\x7f", b"\x80\x01"]
    assert varint_encode(-(2**63)) == b"\xff" * 9 + b"\x01"
    assert encode_var_bytes(b"hi") == b"\x02hi"
    with pytest.raises(ValueError):
        varint_encode(2**63)
    with pytest.raises(ValueError):
        uvarint_encode(-1)
