"""Per-thread zstd compressors and decompressors, reused across calls."""

from __future__ import annotations

import io
import threading

import zstandard

# The fastest compression level.
_COMPRESSION_LEVEL = 1

_local = threading.local()


def get_compressor() -> zstandard.ZstdCompressor:
    """Return this thread's fast, single-threaded zstd compressor."""
    compressor = getattr(_local, "compressor", None)
    if compressor is None:
        compressor = zstandard.ZstdCompressor(level=_COMPRESSION_LEVEL, threads=0)
        _local.compressor = compressor
    return compressor


def get_decompressor() -> zstandard.ZstdDecompressor:
    """Return this thread's zstd decompressor."""
    decompressor = getattr(_local, "decompressor", None)
    if decompressor is None:
        decompressor = zstandard.ZstdDecompressor()
        _local.decompressor = decompressor
    return decompressor


def compress(data: bytes) -> bytes:
    """Compress data into a single zstd frame."""
    return get_compressor().compress(data)


def decompress(data: bytes) -> bytes:
    """Decompress all the zstd frames in data; raise zstandard.ZstdError if invalid."""
    with get_decompressor().stream_reader(
        io.BytesIO(data), read_across_frames=True
    ) as reader:
        return reader.read()