"""
BIP32 extended key serialization (xprv / xpub) and signing-key handles.

Layout of the 78-byte payload, before the base58check wrapper:

    version(4) | depth(1) | parent fingerprint(4) | child index(4)
    | chain code(32) | key(33)

Private keys are stored as 0x00 || k, public keys in compressed SEC1 form.
"""

import enum
import struct
from typing import Union

import base58
from ecdsa import SECP256k1
from ecdsa import SigningKey as _EcdsaSigningKey

from .account import AccountId, DEFAULT_HRP
from .errors import EncodingError, InvalidKeyMaterialError
from .hd_key import (
    ExtendedPublicKey,
    HDKey,
    ZERO_FINGERPRINT,
    compressed_pubkey,
    validate_point,
    validate_scalar,
)
from .secret import SecretBuffer

PAYLOAD_BYTES = 78


class KeyVariant(enum.Enum):
    PRIVATE = "private"
    PUBLIC = "public"


VERSIONS = {
    KeyVariant.PRIVATE: bytes.fromhex("0488ADE4"),
    KeyVariant.PUBLIC: bytes.fromhex("0488B21E"),
}

PREFIXES = {
    KeyVariant.PRIVATE: "xprv",
    KeyVariant.PUBLIC: "xpub",
}


def _variant(variant) -> KeyVariant:
    try:
        return KeyVariant(variant)
    except ValueError:
        raise EncodingError(f"unknown extended key variant: {variant!r}") from None


def public_key(key: Union[HDKey, ExtendedPublicKey]) -> bytes:
    """Compressed 33-byte public key (parity prefix + x coordinate)."""
    return key.key if isinstance(key, ExtendedPublicKey) else key.pubkey


def encode_extended_key(
    key: Union[HDKey, ExtendedPublicKey], variant=KeyVariant.PRIVATE
) -> str:
    variant = _variant(variant)
    if variant is KeyVariant.PRIVATE:
        if not isinstance(key, HDKey):
            raise EncodingError("cannot serialize a public key as xprv")
        privkey = key.privkey
        try:
            validate_scalar(privkey)
        except InvalidKeyMaterialError as e:
            raise EncodingError(str(e)) from None
        key_field = b"\x00" + privkey
    else:
        key_field = public_key(key)

    payload = (
        VERSIONS[variant]
        + bytes([key.depth])
        + key.parent_fingerprint
        + struct.pack(">I", key.child_index)
        + key.chaincode
        + key_field
    )
    if len(payload) != PAYLOAD_BYTES:
        raise EncodingError(f"extended key payload is {len(payload)} bytes, expected 78")

    text = base58.b58encode_check(payload).decode("ascii")
    if not text.startswith(PREFIXES[variant]):
        raise EncodingError(
            f"encoded {variant.value} key does not start with {PREFIXES[variant]!r}"
        )
    return text


def decode_extended_key(text: str) -> Union[HDKey, ExtendedPublicKey]:
    """Parse an xprv/xpub string back into a key node."""
    try:
        raw = base58.b58decode_check(text)
    except ValueError as e:
        raise EncodingError(f"invalid extended key: {e}") from None
    if len(raw) != PAYLOAD_BYTES:
        raise EncodingError(f"extended key payload is {len(raw)} bytes, expected 78")

    version = raw[:4]
    depth = raw[4]
    parent_fingerprint = raw[5:9]
    (child_index,) = struct.unpack(">I", raw[9:13])
    chaincode = raw[13:45]
    key_field = raw[45:78]

    if depth == 0 and (parent_fingerprint != ZERO_FINGERPRINT or child_index != 0):
        raise EncodingError("master key with non-zero parent fingerprint or index")

    if version == VERSIONS[KeyVariant.PRIVATE]:
        if key_field[0] != 0:
            raise EncodingError("private key field must start with 0x00")
        with SecretBuffer(key_field[1:]) as privkey:
            try:
                validate_scalar(privkey.view())
            except InvalidKeyMaterialError as e:
                raise EncodingError(str(e)) from None
            return HDKey(privkey.view(), chaincode, depth, parent_fingerprint, child_index)
    if version == VERSIONS[KeyVariant.PUBLIC]:
        try:
            validate_point(key_field)
        except InvalidKeyMaterialError as e:
            raise EncodingError(str(e)) from None
        return ExtendedPublicKey(key_field, chaincode, depth, parent_fingerprint, child_index)
    raise EncodingError(f"unknown extended key version {version.hex()}")


class SigningKey:
    """secp256k1 signing key handle handed to transaction signers.

    Holds only the 32-byte scalar; the seed and chain code never reach it.
    """

    __slots__ = ("_secret", "_pubkey")

    def __init__(self, privkey):
        self._secret = SecretBuffer(privkey)
        try:
            validate_scalar(self._secret.view())
        except InvalidKeyMaterialError:
            self._secret.wipe()
            raise
        self._pubkey = None

    def __enter__(self) -> "SigningKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"<SigningKey pubkey={self.public_key.hex()}>"

    @property
    def public_key(self) -> bytes:
        if self._pubkey is None:
            self._pubkey = compressed_pubkey(self._secret.view())
        return self._pubkey

    def account_id(self, hrp: str = DEFAULT_HRP) -> AccountId:
        return AccountId.from_public_key(self.public_key, hrp)

    def to_bytes(self) -> bytes:
        return self._secret.to_bytes()

    def to_ecdsa(self) -> _EcdsaSigningKey:
        return _EcdsaSigningKey.from_string(self._secret.to_bytes(), curve=SECP256k1)

    def to_coincurve(self):
        from coincurve import PrivateKey

        return PrivateKey(self._secret.to_bytes())

    def wipe(self) -> None:
        self._secret.wipe()


def signing_key(key: HDKey) -> SigningKey:
    """Reinterpret the private key field of `key` as a signing scalar."""
    return SigningKey(key.privkey)
