from __future__ import annotations

import pytest

from ont_sdk.errors import TxError
from ont_sdk.tx import MAX_SIG_ENTRIES, MutableTransaction, TxType, encode

PAYER = "AQf4Mzu1YJrhz9f3aRkkwSm9n3qhXGSh4p"


def _mtx(**kw) -> MutableTransaction:
    base = dict(tx_type=TxType.INVOKE_NEO, payload=b"\x51", payer=PAYER, nonce=1, gas_price=2500)
    base.update(kw)
    return MutableTransaction(**base)


def _sign(mtx: MutableTransaction) -> MutableTransaction:
    mtx.add_sig(pub_keys=["02" + "aa" * 32], m=1, sig_data=["bb" * 64])
    return mtx


def test_into_immutable_copies_fields_and_hash():
    mtx = _sign(_mtx())
    tx = mtx.into_immutable()
    assert tx.payer == PAYER
    assert tx.tx_type == 0xD1
    assert tx.hash == mtx.hash()
    assert len(tx.hash) == 64
    # later edits to the builder do not leak into the frozen tx
    mtx.sigs.clear()
    assert len(tx.sigs) == 1


def test_signatures_do_not_change_hash():
    mtx = _mtx()
    before = mtx.hash()
    _sign(mtx)
    assert mtx.hash() == before


@pytest.mark.parametrize(
    "kw,field",
    [
        ({"payer": None}, "payer"),
        ({"payer": ""}, "payer"),
        ({"nonce": -1}, "nonce"),
        ({"nonce": 2**32}, "nonce"),
        ({"gas_limit": 2**64}, "gas_limit"),
    ],
)
def test_invalid_fields(kw, field):
    with pytest.raises(TxError) as ei:
        _sign(_mtx(**kw)).into_immutable()
    assert ei.value.field == field


def test_unsigned_rejected():
    with pytest.raises(TxError, match="not signed"):
        _mtx().into_immutable()


def test_signature_entries_validated():
    mtx = _mtx()
    mtx.add_sig(pub_keys=["02aa", "03bb"], m=2, sig_data=["cc"])
    with pytest.raises(TxError, match="needs 2"):
        mtx.into_immutable()

    mtx = _mtx()
    mtx.add_sig(pub_keys=[], m=1, sig_data=["cc"])
    with pytest.raises(TxError, match="no public keys"):
        mtx.into_immutable()

    mtx = _mtx()
    for _ in range(MAX_SIG_ENTRIES + 1):
        mtx.add_sig(pub_keys=["02aa"], m=1, sig_data=["cc"])
    with pytest.raises(TxError, match="too many"):
        mtx.into_immutable()


def test_serialize_deserialize_preserves_hash():
    tx = _sign(_mtx(attributes=[1, "memo"])).into_immutable()
    raw = encode.serialize(tx)
    back = encode.deserialize(raw)
    assert back.hash == tx.hash
    assert back.sigs == tx.sigs
    assert encode.serialize(back) == raw
    assert encode.serialize_hex(tx) == raw.hex()


def test_deserialize_garbage():
    with pytest.raises(TxError):
        encode.deserialize(b"\xff\x00")
