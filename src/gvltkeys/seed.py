"""BIP39 mnemonic-to-seed derivation (PBKDF2-HMAC-SHA512)."""

import hashlib
import unicodedata
from typing import Optional, Union

from . import mnemonic_codec
from .mnemonic_codec import Mnemonic
from .secret import SecretBuffer

SEED_BYTES = 64
PBKDF2_ROUNDS = 2048
SALT_PREFIX = "mnemonic"


def derive_seed(
    mnemonic: Union[Mnemonic, str], passphrase: Optional[str] = ""
) -> SecretBuffer:
    """Return the 64-byte BIP39 seed in a SecretBuffer.

    A plain string is validated with mnemonic_codec.parse() first.
    """
    if isinstance(mnemonic, str):
        mnemonic = mnemonic_codec.parse(mnemonic)
    password = mnemonic_codec.normalize(mnemonic.phrase)
    salt = SALT_PREFIX + unicodedata.normalize("NFKD", passphrase or "")
    seed = hashlib.pbkdf2_hmac(
        "sha512",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ROUNDS,
        SEED_BYTES,
    )
    return SecretBuffer(seed)
