"""
Bech32 encoding for Cosmos-style account addresses.
Reference implementation from BIP173, without the segwit witness version.
"""

from typing import List, Tuple

from .errors import EncodingError

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32_CONST = 1
MAX_LENGTH = 90
CHECKSUM_LENGTH = 6


def _polymod(values):
    GEN = [0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3]
    chk = 1
    for v in values:
        b = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ v
        for i in range(5):
            chk ^= GEN[i] if ((b >> i) & 1) else 0
    return chk


def _hrp_expand(hrp):
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _create_checksum(hrp, data):
    values = _hrp_expand(hrp) + data
    polymod = _polymod(values + [0] * CHECKSUM_LENGTH) ^ BECH32_CONST
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def convertbits(data, frombits, tobits, pad=True):
    """Regroup a sequence of `frombits`-wide ints into `tobits`-wide ints.

    Returns None when the input has a value wider than `frombits`, or, with
    pad=False, leftover non-zero bits.
    """
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    for value in data:
        if value < 0 or value >> frombits:
            return None
        acc = (acc << frombits) | value
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        return None
    return ret


def check_hrp(hrp: str) -> None:
    if not hrp:
        raise EncodingError("human-readable prefix is empty")
    if any(ord(x) < 33 or ord(x) > 126 for x in hrp):
        raise EncodingError(f"human-readable prefix has invalid characters: {hrp!r}")
    if hrp.lower() != hrp:
        raise EncodingError(f"human-readable prefix must be lowercase: {hrp!r}")


def encode(hrp: str, payload: bytes) -> str:
    """Encode `payload` bytes under `hrp`."""
    check_hrp(hrp)
    data = convertbits(payload, 8, 5)
    checksum = _create_checksum(hrp, data)
    text = hrp + "1" + "".join([CHARSET[d] for d in data + checksum])
    if len(text) > MAX_LENGTH:
        raise EncodingError(f"bech32 string longer than {MAX_LENGTH} characters")
    return text


def decode(bech: str) -> Tuple[str, bytes]:
    """Decode a bech32 string. Returns (hrp, payload)."""
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        raise EncodingError("bech32 string has characters outside printable ASCII")
    if bech.lower() != bech and bech.upper() != bech:
        raise EncodingError("bech32 string mixes upper and lower case")
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(bech) or len(bech) > MAX_LENGTH:
        raise EncodingError("bech32 string has a missing or misplaced separator")
    if not all(x in CHARSET for x in bech[pos + 1 :]):
        raise EncodingError("bech32 data part has characters outside the charset")
    hrp = bech[:pos]
    data: List[int] = [CHARSET.find(x) for x in bech[pos + 1 :]]
    if _polymod(_hrp_expand(hrp) + data) != BECH32_CONST:
        raise EncodingError("bech32 checksum mismatch")
    payload = convertbits(data[:-CHECKSUM_LENGTH], 5, 8, False)
    if payload is None:
        raise EncodingError("bech32 data part has invalid padding")
    return hrp, bytes(payload)
