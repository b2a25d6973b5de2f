"""Chain account identifiers: bech32(hrp, RIPEMD160(SHA256(pubkey)))."""

from dataclasses import dataclass

from . import bech32_codec
from .errors import EncodingError, InvalidKeyMaterialError
from .hashes import hash160

DEFAULT_HRP = "gvlt"
KEY_HASH_BYTES = 20
COMPRESSED_PUBKEY_BYTES = 33


@dataclass(frozen=True)
class AccountId:
    hrp: str
    key_hash: bytes

    def __post_init__(self):
        if len(self.key_hash) != KEY_HASH_BYTES:
            raise EncodingError(
                f"account key hash must be {KEY_HASH_BYTES} bytes, got {len(self.key_hash)}"
            )

    @classmethod
    def from_public_key(cls, pubkey: bytes, hrp: str = DEFAULT_HRP) -> "AccountId":
        if len(pubkey) != COMPRESSED_PUBKEY_BYTES or pubkey[0] not in (2, 3):
            raise InvalidKeyMaterialError("expected a 33-byte compressed secp256k1 public key")
        return cls(hrp, hash160(pubkey))

    def __str__(self) -> str:
        return bech32_codec.encode(self.hrp, self.key_hash)


def account_to_text(identity: AccountId) -> str:
    return str(identity)


def text_to_account(text: str, hrp: str = DEFAULT_HRP) -> AccountId:
    """Decode an account address, requiring the given prefix."""
    decoded_hrp, payload = bech32_codec.decode(text)
    if decoded_hrp != hrp:
        raise EncodingError(f"expected prefix {hrp!r}, got {decoded_hrp!r}")
    return AccountId(decoded_hrp, payload)
