"""
Environment-driven defaults for key generation.

    GEVULOT_MNEMONIC      phrase used by compute-key
    GEVULOT_PASSWORD      BIP39 passphrase (default: empty)
    GVLT_DERIVATION_PATH  BIP32 path (default: m/44'/118'/0'/0/0)
    GVLT_HRP              bech32 account prefix (default: gvlt)
    GVLT_ENTROPY_BITS     keygen strength (default: 256, i.e. 24 words)
    GVLT_WORKERS          processes for batch derivation (default: CPU count)
    GVLT_LOG_LEVEL        CLI log level (default: WARNING)
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .account import DEFAULT_HRP
from .errors import InvalidEntropyLength, KeyDerivationError
from .mnemonic_codec import ENTROPY_BITS
from .path import DEFAULT_PATH, DerivationPath

DEFAULT_ENTROPY_BITS = 256


def _int_env(env: Mapping[str, str], name: str, default: int, error=KeyDerivationError) -> int:
    raw = env.get(name, "") or ""
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise error(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    mnemonic: Optional[str] = field(default=None, repr=False)
    password: str = field(default="", repr=False)
    path: DerivationPath = DEFAULT_PATH
    hrp: str = DEFAULT_HRP
    entropy_bits: int = DEFAULT_ENTROPY_BITS
    workers: int = field(default_factory=lambda: os.cpu_count() or 1)
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.entropy_bits not in ENTROPY_BITS:
            raise InvalidEntropyLength(
                f"entropy must be one of {ENTROPY_BITS} bits, got {self.entropy_bits}"
            )
        if self.workers < 1:
            raise KeyDerivationError(f"workers must be at least 1, got {self.workers}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise KeyDerivationError(f"unknown log level {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        path = env.get("GVLT_DERIVATION_PATH", "").strip()
        return cls(
            mnemonic=env.get("GEVULOT_MNEMONIC") or None,
            password=env.get("GEVULOT_PASSWORD", ""),
            path=DerivationPath.parse(path) if path else DEFAULT_PATH,
            hrp=env.get("GVLT_HRP", "").strip() or DEFAULT_HRP,
            entropy_bits=_int_env(
                env, "GVLT_ENTROPY_BITS", DEFAULT_ENTROPY_BITS, InvalidEntropyLength
            ),
            workers=_int_env(env, "GVLT_WORKERS", os.cpu_count() or 1),
            log_level=(env.get("GVLT_LOG_LEVEL", "").strip() or "WARNING").upper(),
        )

    def override(self, **changes) -> "Settings":
        """Copy with the non-None values in `changes` applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if isinstance(changes.get("path"), str):
            changes["path"] = DerivationPath.parse(changes["path"])
        return replace(self, **changes)
