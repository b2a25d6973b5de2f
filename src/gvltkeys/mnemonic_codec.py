"""
BIP39 mnemonic generation and validation.

The English word list comes from the `mnemonic` package; the bit packing
and checksum check are done here so each failure gets its own error type.
"""

import logging
import secrets
import unicodedata
from dataclasses import dataclass
from difflib import get_close_matches
from typing import Dict, List, Optional, Tuple

from mnemonic import Mnemonic as _Bip39

from .errors import (
    ChecksumMismatchError,
    InvalidEntropyLength,
    InvalidMnemonicLength,
    UnknownWordError,
)
from .hashes import sha256

logger = logging.getLogger(__name__)

ENTROPY_BITS = (128, 160, 192, 224, 256)
WORD_COUNTS = (12, 15, 18, 21, 24)
BITS_PER_WORD = 11

_BIP39: Optional[_Bip39] = None
_WORD_INDEX: Optional[Dict[str, int]] = None


def _bip39() -> _Bip39:
    global _BIP39
    if _BIP39 is None:
        _BIP39 = _Bip39("english")
    return _BIP39


def get_wordlist() -> List[str]:
    return _bip39().wordlist


def _word_index() -> Dict[str, int]:
    global _WORD_INDEX
    if _WORD_INDEX is None:
        _WORD_INDEX = {w: i for i, w in enumerate(get_wordlist())}
    return _WORD_INDEX


def normalize(text: str) -> str:
    """NFKD-normalize and collapse whitespace."""
    return " ".join(unicodedata.normalize("NFKD", text).split())


def checksum_bits(entropy: bytes) -> int:
    """Leading len(entropy)*8/32 bits of SHA256(entropy), as an int."""
    cs_len = len(entropy) * 8 // 32
    return sha256(entropy)[0] >> (8 - cs_len)


@dataclass(frozen=True, repr=False)
class Mnemonic:
    """An immutable, checksum-valid BIP39 phrase and the entropy it encodes."""

    words: Tuple[str, ...]
    entropy: bytes

    def __repr__(self) -> str:
        return f"<Mnemonic {len(self.words)} words>"

    @property
    def phrase(self) -> str:
        return " ".join(self.words)

    @property
    def entropy_bits(self) -> int:
        return len(self.entropy) * 8

    @property
    def checksum(self) -> int:
        return checksum_bits(self.entropy)


def generate(entropy_bits: int = 256, entropy: Optional[bytes] = None) -> Mnemonic:
    """Create a mnemonic from fresh (or supplied) entropy."""
    if entropy_bits not in ENTROPY_BITS:
        raise InvalidEntropyLength(
            f"entropy must be one of {ENTROPY_BITS} bits, got {entropy_bits}"
        )
    if entropy is None:
        entropy = secrets.token_bytes(entropy_bits // 8)
    elif len(entropy) * 8 != entropy_bits:
        raise InvalidEntropyLength(
            f"expected {entropy_bits} bits of entropy, got {len(entropy) * 8}"
        )
    phrase = _bip39().to_mnemonic(entropy)
    logger.debug("generated %d-word mnemonic", len(phrase.split()))
    return Mnemonic(tuple(phrase.split()), bytes(entropy))


def from_entropy(entropy: bytes) -> Mnemonic:
    return generate(len(entropy) * 8, entropy)


def parse(phrase: str) -> Mnemonic:
    """Validate a user-supplied phrase and recover its entropy.

    Word lookup happens before anything else: an unknown word is reported
    as such and never reaches the checksum comparison.
    """
    words = normalize(phrase).lower().split()
    index = _word_index()

    acc = 0
    for pos, word in enumerate(words, start=1):
        try:
            acc = (acc << BITS_PER_WORD) | index[word]
        except KeyError:
            matches = get_close_matches(word, get_wordlist(), n=5, cutoff=0.6)
            raise UnknownWordError(word, pos, matches) from None

    if len(words) not in WORD_COUNTS:
        raise InvalidMnemonicLength(
            f"expected {', '.join(map(str, WORD_COUNTS))} words, got {len(words)}"
        )

    cs_len = len(words) * BITS_PER_WORD // 33
    ent_bits = len(words) * BITS_PER_WORD - cs_len
    entropy = (acc >> cs_len).to_bytes(ent_bits // 8, "big")
    if acc & ((1 << cs_len) - 1) != checksum_bits(entropy):
        raise ChecksumMismatchError("mnemonic checksum does not match its words")

    return Mnemonic(tuple(words), entropy)
