import hashlib
import hmac


def sha256(data) -> bytes:
    return hashlib.sha256(data).digest()


def hmac_sha512(key, data) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def _ripemd160(data: bytes) -> bytes:
    """RIPEMD160 with multiple fallbacks for different environments."""
    try:
        return hashlib.new("ripemd160", data).digest()
    except (ValueError, TypeError):
        pass
    try:
        return hashlib.new("ripemd160", data, usedforsecurity=False).digest()
    except (ValueError, TypeError):
        pass
    from Crypto.Hash import RIPEMD160
    return RIPEMD160.new(data).digest()


def hash160(data: bytes) -> bytes:
    return _ripemd160(sha256(data))
