"""A writer that checks the SHA256 hash and size of what passes through it."""

from __future__ import annotations

import hashlib
from typing import Any


class VerificationError(ValueError):
    """Raised when the written data does not match the expected hash or size."""


class Sha256Verifier:
    """Forward writes to a sink, verifying size and SHA256 hash on close.

    The sink must have write() and close() methods. On a successful
    verification the sink is closed; on failure it is left open.
    """

    def __init__(self, expected_hash: str, expected_size: int, sink: Any):
        self.expected_hash = expected_hash
        self.expected_size = expected_size
        self.actual_size = 0
        self._sink = sink
        self._hasher = hashlib.sha256()

    def write(self, data: bytes) -> int:
        """Write data to the sink and hash it; return the number of bytes written."""
        self._hasher.update(data)
        written = self._sink.write(data)
        count = len(data) if written is None else written
        if count > 0:
            self.actual_size += count
        if count < len(data):
            raise OSError("short write")
        return count

    def close(self) -> None:
        """Verify size and hash, then close the sink."""
        if self.actual_size != self.expected_size:
            raise VerificationError(
                f"error: expected {self.expected_size} bytes, got {self.actual_size}"
            )
        actual_hash = self._hasher.hexdigest()
        if actual_hash != self.expected_hash:
            raise VerificationError(
                f"error: expected hash {self.expected_hash}, got {actual_hash}"
            )
        self._sink.close()

    def __enter__(self) -> "Sha256Verifier":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.close()
        return False