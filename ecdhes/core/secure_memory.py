"""Wipe-on-release buffers for transient key material."""


class SecureBytes:
    """Mutable buffer that is zeroed when released.

    Use as a context manager; the buffer is wiped on exit whether or not
    the block raised. Python may still hold immutable copies made by the
    caller or by a primitive, so only data copied into the buffer is wiped.
    """

    def __init__(self, data: bytes | bytearray | memoryview = b""):
        self._buffer = bytearray(data)

    def __enter__(self) -> "SecureBytes":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.wipe()
        return False

    def __len__(self) -> int:
        return len(self._buffer)

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

    def __repr__(self) -> str:
        return f"SecureBytes(<{len(self._buffer)} bytes>)"

    @property
    def buffer(self) -> bytearray:
        return self._buffer

    def extend(self, data: bytes | bytearray | memoryview) -> None:
        self._buffer.extend(data)

    def wipe(self) -> None:
        for i in range(len(self._buffer)):
            self._buffer[i] = 0

    @property
    def wiped(self) -> bool:
        return not any(self._buffer)
