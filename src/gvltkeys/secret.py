"""Zero-on-exit byte buffers for seeds and private scalars."""

from typing import Union


class SecretBuffer:
    """Mutable copy of secret bytes that is overwritten with zeros on wipe().

    Use it as a context manager so the bytes are wiped on every exit path:

        with derive_seed(mnemonic) as seed:
            root = HDKey.from_seed(seed)
    """

    __slots__ = ("_buf",)

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._buf = bytearray(data)

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __repr__(self) -> str:
        state = "wiped" if self.wiped else f"{len(self._buf)} bytes"
        return f"<SecretBuffer {state}>"

    def __eq__(self, other) -> bool:
        if isinstance(other, SecretBuffer):
            return self._buf == other._buf
        if isinstance(other, (bytes, bytearray)):
            return self._buf == other
        return NotImplemented

    __hash__ = None

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        if getattr(self, "_buf", None) is not None:
            self.wipe()

    @property
    def wiped(self) -> bool:
        return not any(self._buf)

    def view(self) -> memoryview:
        """Read-only view over the live buffer (no copy)."""
        return memoryview(self._buf).toreadonly()

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0
