"""Deterministic BIP39/BIP32 key derivation for Gevulot accounts."""

from .account import AccountId, DEFAULT_HRP, account_to_text, text_to_account
from .config import Settings
from .errors import (
    ChecksumMismatchError,
    DerivationArithmeticError,
    EncodingError,
    InvalidEntropyLength,
    InvalidKeyMaterialError,
    InvalidMnemonicLength,
    InvalidPathSyntax,
    KeyDerivationError,
    MnemonicError,
    UnknownWordError,
)
from .hd_key import ExtendedPublicKey, HDKey, derive_path, get_engine
from .key_codec import (
    KeyVariant,
    SigningKey,
    decode_extended_key,
    encode_extended_key,
    public_key,
    signing_key,
)
from .keygen import (
    BatchResult,
    DerivedAccount,
    KeyReport,
    compute_key,
    derive_account,
    derive_accounts,
    derive_batch,
    generate_key,
    new_mnemonic,
    parse_mnemonic,
)
from .mnemonic_codec import Mnemonic
from .path import DEFAULT_PATH, ChildIndex, DerivationPath
from .secret import SecretBuffer
from .seed import derive_seed

__all__ = [
    "AccountId",
    "BatchResult",
    "ChecksumMismatchError",
    "ChildIndex",
    "DEFAULT_HRP",
    "DEFAULT_PATH",
    "DerivationArithmeticError",
    "DerivationPath",
    "DerivedAccount",
    "EncodingError",
    "ExtendedPublicKey",
    "HDKey",
    "InvalidEntropyLength",
    "InvalidKeyMaterialError",
    "InvalidMnemonicLength",
    "InvalidPathSyntax",
    "KeyDerivationError",
    "KeyReport",
    "KeyVariant",
    "Mnemonic",
    "MnemonicError",
    "SecretBuffer",
    "Settings",
    "SigningKey",
    "UnknownWordError",
    "account_to_text",
    "compute_key",
    "decode_extended_key",
    "derive_account",
    "derive_accounts",
    "derive_batch",
    "derive_path",
    "derive_seed",
    "encode_extended_key",
    "generate_key",
    "get_engine",
    "new_mnemonic",
    "parse_mnemonic",
    "public_key",
    "signing_key",
    "text_to_account",
]
