"""
BIP32 HD Key Derivation using coincurve (libsecp256k1) for performance.
Falls back to ecdsa if coincurve is unavailable.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Optional, Union

from ecdsa import SECP256k1, MalformedPointError, SigningKey, VerifyingKey

from .errors import DerivationArithmeticError, InvalidKeyMaterialError
from .hashes import hash160, hmac_sha512
from .path import ChildIndex, DerivationPath, as_path
from .secret import SecretBuffer

logger = logging.getLogger(__name__)

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
MASTER_KEY_DOMAIN = b"Bitcoin seed"
ZERO_FINGERPRINT = b"\x00\x00\x00\x00"

# Try fast C library first, fall back to pure Python
try:
    from coincurve import PublicKey as _CPublicKey

    _ENGINE = "coincurve"
except ImportError:
    _CPublicKey = None
    _ENGINE = "ecdsa"


def _coincurve_pubkey(privkey_bytes: bytes) -> bytes:
    pk = _CPublicKey.from_valid_secret(privkey_bytes)
    return pk.format(compressed=True)


def _ecdsa_pubkey(privkey_bytes: bytes) -> bytes:
    sk = SigningKey.from_string(privkey_bytes, curve=SECP256k1)
    vk = sk.get_verifying_key()
    x = vk.pubkey.point.x()
    y = vk.pubkey.point.y()
    prefix = b"\x02" if y % 2 == 0 else b"\x03"
    return prefix + x.to_bytes(32, "big")


_get_pubkey = _coincurve_pubkey if _ENGINE == "coincurve" else _ecdsa_pubkey


def get_engine():
    return _ENGINE


def validate_scalar(privkey: bytes) -> int:
    """Return the private key as an int, or raise if it is not in [1, n-1]."""
    if len(privkey) != 32:
        raise InvalidKeyMaterialError(f"private key must be 32 bytes, got {len(privkey)}")
    k = int.from_bytes(privkey, "big")
    if not 0 < k < SECP256K1_ORDER:
        raise InvalidKeyMaterialError("private key is not a valid secp256k1 scalar")
    return k


def validate_point(pubkey: bytes) -> bytes:
    """Return `pubkey` if it is a compressed point on secp256k1, else raise."""
    pubkey = bytes(pubkey)
    if len(pubkey) != 33 or pubkey[0] not in (2, 3):
        raise InvalidKeyMaterialError("public key is not a compressed point")
    try:
        if _CPublicKey is not None:
            _CPublicKey(pubkey)
        else:
            VerifyingKey.from_string(pubkey, curve=SECP256k1)
    except (ValueError, MalformedPointError):
        raise InvalidKeyMaterialError("public key is not on secp256k1") from None
    return pubkey


def compressed_pubkey(privkey) -> bytes:
    privkey = bytes(privkey)
    validate_scalar(privkey)
    return _get_pubkey(privkey)


@dataclass(frozen=True)
class ExtendedPublicKey:
    """Public half of an HDKey node."""

    key: bytes
    chaincode: bytes
    depth: int = 0
    parent_fingerprint: bytes = ZERO_FINGERPRINT
    child_index: int = 0

    @property
    def fingerprint(self) -> bytes:
        return hash160(self.key)[:4]


class HDKey:
    """BIP32 Hierarchical Deterministic private key node.

    The private scalar lives in a SecretBuffer; use the key as a context
    manager (or call wipe()) so it is zeroed once it is no longer needed.
    """

    __slots__ = (
        "_privkey",
        "chaincode",
        "depth",
        "parent_fingerprint",
        "child_index",
        "_pubkey",
    )

    def __init__(
        self,
        privkey,
        chaincode: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = ZERO_FINGERPRINT,
        child_index: int = 0,
    ):
        if len(chaincode) != 32:
            raise InvalidKeyMaterialError("chain code must be 32 bytes")
        if len(parent_fingerprint) != 4:
            raise InvalidKeyMaterialError("parent fingerprint must be 4 bytes")
        self._privkey = SecretBuffer(privkey)
        self.chaincode = bytes(chaincode)
        self.depth = depth
        self.parent_fingerprint = bytes(parent_fingerprint)
        self.child_index = child_index
        self._pubkey = None

    @classmethod
    def from_seed(cls, seed) -> "HDKey":
        if isinstance(seed, SecretBuffer):
            seed = seed.view()
        I = hmac_sha512(MASTER_KEY_DOMAIN, seed)
        il = SecretBuffer(I[:32])
        k = int.from_bytes(il.view(), "big")
        if not 0 < k < SECP256K1_ORDER:
            il.wipe()
            raise DerivationArithmeticError("master key is not a valid secp256k1 scalar")
        with il:
            return cls(il.view(), I[32:])

    def __enter__(self) -> "HDKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"<HDKey depth={self.depth} child_index={self.child_index:#x}>"

    @property
    def privkey(self) -> bytes:
        return self._privkey.to_bytes()

    @property
    def pubkey(self) -> bytes:
        if self._pubkey is None:
            self._pubkey = compressed_pubkey(self._privkey.view())
        return self._pubkey

    @property
    def fingerprint(self) -> bytes:
        return hash160(self.pubkey)[:4]

    @property
    def wiped(self) -> bool:
        return self._privkey.wiped

    def public(self) -> ExtendedPublicKey:
        return ExtendedPublicKey(
            key=self.pubkey,
            chaincode=self.chaincode,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_index=self.child_index,
        )

    def copy(self) -> "HDKey":
        return HDKey(
            self._privkey.view(),
            self.chaincode,
            self.depth,
            self.parent_fingerprint,
            self.child_index,
        )

    def wipe(self) -> None:
        self._privkey.wipe()

    def derive_child(
        self, index: Union[int, ChildIndex], hardened: Optional[bool] = None
    ) -> "HDKey":
        """Derive one child key.

        `index` is either a ChildIndex, a raw index with an explicit
        `hardened` flag, or an already-encoded index (>= 2**31 is hardened).
        """
        if isinstance(index, ChildIndex):
            child = index
        elif hardened is None:
            child = ChildIndex.from_encoded(index)
        else:
            child = ChildIndex(index, hardened)
        if self.depth >= 0xFF:
            raise DerivationArithmeticError("maximum derivation depth reached")

        i = child.encoded
        if child.hardened:
            data = b"\x00" + self._privkey.view() + struct.pack(">I", i)
        else:
            data = self.pubkey + struct.pack(">I", i)
        I = hmac_sha512(self.chaincode, data)
        il = int.from_bytes(I[:32], "big")
        if il >= SECP256K1_ORDER:
            raise DerivationArithmeticError(f"derived tweak out of range at index {child}")
        child_int = (il + int.from_bytes(self._privkey.view(), "big")) % SECP256K1_ORDER
        if child_int == 0:
            raise DerivationArithmeticError(f"derived key is zero at index {child}")
        return HDKey(
            child_int.to_bytes(32, "big"),
            I[32:],
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            child_index=i,
        )

    def derive_path(self, path: Union[str, DerivationPath]) -> "HDKey":
        """Derive from path like m/44'/118'/0'/0/0.

        Intermediate keys are wiped as soon as their child exists. The
        returned key is always a new object, even for the empty path "m".
        """
        path = as_path(path)
        key = self
        try:
            for segment in path:
                child = key.derive_child(segment)
                if key is not self:
                    key.wipe()
                key = child
        except BaseException:
            if key is not self:
                key.wipe()
            raise
        if key is self:
            key = self.copy()
        logger.debug("derived %s at depth %d (%s)", path, key.depth, _ENGINE)
        return key


def derive_path(seed, path: Union[str, DerivationPath]) -> HDKey:
    """Master key from `seed`, then every segment of `path` in order."""
    with HDKey.from_seed(seed) as root:
        return root.derive_path(path)
