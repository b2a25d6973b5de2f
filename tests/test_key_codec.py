import pytest

from gvltkeys import key_codec
from gvltkeys.errors import EncodingError, InvalidKeyMaterialError
from gvltkeys.hd_key import SECP256K1_ORDER, ExtendedPublicKey, HDKey
from gvltkeys.key_codec import (
    KeyVariant,
    SigningKey,
    decode_extended_key,
    encode_extended_key,
    public_key,
    signing_key,
)

XPRV_M0H = "xprv9uHRZZhk6KAJC1avXpDAp4MDc3sQKNxDiPvvkX8Br5ngLNv1TxvUxt4cV1rGL5hj6KCesnDYUhd7oWgT11eZG7XnxHrnYeSvkzY7d2bhkJ7"
XPUB_M0H = "xpub68Gmy5EdvgibQVfPdqkBBCHxA5htiqg55crXYuXoQRKfDBFA1WEjWgP6LHhwBZeNK1VTsfTFUHCdrfp1bgwQ9xv5ski8PX9rL2dZXvgGDnw"


def _root():
    return HDKey.from_seed(bytes.fromhex("000102030405060708090a0b0c0d0e0f"))


def test_public_key_is_compressed():
    key = _root()
    pub = public_key(key)
    assert len(pub) == 33
    assert pub[0] in (2, 3)
    assert public_key(key.public()) == pub


def test_variant_accepts_enum_and_string():
    key = _root().derive_child(0, hardened=True)
    assert encode_extended_key(key, KeyVariant.PRIVATE) == XPRV_M0H
    assert encode_extended_key(key, "public") == XPUB_M0H
    assert encode_extended_key(key.public(), KeyVariant.PUBLIC) == XPUB_M0H


def test_unknown_variant():
    with pytest.raises(EncodingError):
        encode_extended_key(_root(), "secret")


def test_public_key_cannot_be_encoded_private():
    with pytest.raises(EncodingError):
        encode_extended_key(_root().public(), KeyVariant.PRIVATE)


def test_prefix_mismatch_is_an_error_not_a_crash(monkeypatch):
    # testnet tprv version bytes produce a "tprv" string
    monkeypatch.setitem(key_codec.VERSIONS, KeyVariant.PRIVATE, bytes.fromhex("04358394"))
    with pytest.raises(EncodingError):
        encode_extended_key(_root(), KeyVariant.PRIVATE)


def test_decode_private_and_public():
    key = decode_extended_key(XPRV_M0H)
    assert isinstance(key, HDKey)
    assert key.depth == 1
    assert key.child_index == 0x80000000
    assert encode_extended_key(key, "public") == XPUB_M0H

    pub = decode_extended_key(XPUB_M0H)
    assert isinstance(pub, ExtendedPublicKey)
    assert pub.key == key.pubkey
    assert pub.parent_fingerprint.hex() == "3442193e"


@pytest.mark.parametrize(
    "text",
    [
        XPRV_M0H[:-1] + ("1" if XPRV_M0H[-1] != "1" else "2"),
        XPRV_M0H[:-4],
        "xprv0OIl",
        "",
    ],
)
def test_decode_rejects_garbage(text):
    with pytest.raises(EncodingError):
        decode_extended_key(text)


def test_decode_rejects_unknown_version():
    import base58

    raw = base58.b58decode_check(XPUB_M0H)
    bogus = base58.b58encode_check(b"\x01\x02\x03\x04" + raw[4:]).decode()
    with pytest.raises(EncodingError):
        decode_extended_key(bogus)


def test_decode_rejects_out_of_range_private_key():
    import base58

    raw = base58.b58decode_check(XPRV_M0H)
    bad = raw[:46] + SECP256K1_ORDER.to_bytes(32, "big")
    with pytest.raises(EncodingError):
        decode_extended_key(base58.b58encode_check(bad).decode())


def test_signing_key_matches_node():
    key = _root().derive_path("m/44'/118'/0'/0/0")
    sk = signing_key(key)
    assert sk.public_key == key.pubkey
    assert sk.to_bytes() == key.privkey
    vk = sk.to_ecdsa().get_verifying_key()
    assert vk.to_string("compressed") == key.pubkey


def test_signing_key_to_coincurve():
    pytest.importorskip("coincurve")
    key = _root()
    sk = signing_key(key)
    assert sk.to_coincurve().public_key.format(compressed=True) == key.pubkey


@pytest.mark.parametrize(
    "raw", [b"\x00" * 32, SECP256K1_ORDER.to_bytes(32, "big"), b"\xff" * 32, b"\x01" * 31]
)
def test_signing_key_rejects_invalid_scalars(raw):
    with pytest.raises(InvalidKeyMaterialError):
        SigningKey(raw)


def test_signing_key_from_wiped_node_is_rejected():
    key = _root()
    key.wipe()
    with pytest.raises(InvalidKeyMaterialError):
        signing_key(key)


def test_signing_key_wipe():
    with signing_key(_root()) as sk:
        pub = sk.public_key
    assert sk.to_bytes() == b"\x00" * 32
    assert pub.hex() in repr(sk)


def test_wiped_node_cannot_be_encoded_private():
    key = _root()
    key.wipe()
    with pytest.raises(EncodingError):
        encode_extended_key(key, "private")


@pytest.mark.parametrize("prefix", [b"\x02", b"\x03"])
def test_decode_rejects_point_off_curve(prefix):
    import base58

    raw = base58.b58decode_check(XPUB_M0H)
    bad = raw[:45] + prefix + b"\x00" * 32
    with pytest.raises(EncodingError):
        decode_extended_key(base58.b58encode_check(bad).decode())


def test_decode_rejects_uncompressed_prefix():
    import base58

    raw = base58.b58decode_check(XPUB_M0H)
    bad = raw[:45] + b"\x04" + raw[46:]
    with pytest.raises(EncodingError):
        decode_extended_key(base58.b58encode_check(bad).decode())
