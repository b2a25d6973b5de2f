"""BIP32 derivation paths like m/44'/118'/0'/0/0."""

from dataclasses import dataclass
from typing import Iterator, Tuple

from .errors import InvalidPathSyntax

HARDENED = 0x80000000
HARDENED_MARKERS = ("'", "h", "H")


@dataclass(frozen=True)
class ChildIndex:
    index: int
    hardened: bool = False

    def __post_init__(self):
        if not 0 <= self.index < HARDENED:
            raise InvalidPathSyntax(f"child index out of range: {self.index}")

    @property
    def encoded(self) -> int:
        """Index as serialized in the HMAC input (top bit set if hardened)."""
        return self.index + HARDENED if self.hardened else self.index

    @classmethod
    def from_encoded(cls, value: int) -> "ChildIndex":
        if not 0 <= value <= 0xFFFFFFFF:
            raise InvalidPathSyntax(f"child index out of range: {value}")
        if value >= HARDENED:
            return cls(value - HARDENED, True)
        return cls(value, False)

    def __str__(self) -> str:
        return f"{self.index}'" if self.hardened else str(self.index)


@dataclass(frozen=True)
class DerivationPath:
    segments: Tuple[ChildIndex, ...] = ()

    @classmethod
    def parse(cls, path: str) -> "DerivationPath":
        """Parse m/84'/1776'/0'/0 style paths. 'h' and 'H' also mark hardened."""
        parts = path.strip().split("/")
        if parts[0] not in ("m", "M"):
            raise InvalidPathSyntax(f"path must start with 'm': {path!r}")
        segments = []
        for part in parts[1:]:
            hardened = part.endswith(HARDENED_MARKERS)
            digits = part[:-1] if hardened else part
            if not digits.isdigit() or not digits.isascii():
                raise InvalidPathSyntax(f"invalid path segment {part!r} in {path!r}")
            segments.append(ChildIndex(int(digits), hardened))
        return cls(tuple(segments))

    @classmethod
    def bip44(
        cls, coin_type: int, account: int = 0, change: int = 0, address_index: int = 0
    ) -> "DerivationPath":
        return cls(
            (
                ChildIndex(44, True),
                ChildIndex(coin_type, True),
                ChildIndex(account, True),
                ChildIndex(change),
                ChildIndex(address_index),
            )
        )

    def __str__(self) -> str:
        return "/".join(["m"] + [str(s) for s in self.segments])

    def __iter__(self) -> Iterator[ChildIndex]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def child(self, index: int, hardened: bool = False) -> "DerivationPath":
        return DerivationPath(self.segments + (ChildIndex(index, hardened),))

    def with_address_index(self, index: int) -> "DerivationPath":
        """Replace the last (non-hardened) segment, e.g. the BIP44 address index."""
        if not self.segments:
            raise InvalidPathSyntax("cannot set an address index on the root path")
        last = self.segments[-1]
        return DerivationPath(self.segments[:-1] + (ChildIndex(index, last.hardened),))


def as_path(path) -> DerivationPath:
    if isinstance(path, DerivationPath):
        return path
    if isinstance(path, str):
        return DerivationPath.parse(path)
    raise InvalidPathSyntax(f"unsupported path type: {type(path).__name__}")


# Cosmos SDK coin type, used by the Gevulot chain.
COSMOS_COIN_TYPE = 118
DEFAULT_PATH = DerivationPath.bip44(COSMOS_COIN_TYPE)
