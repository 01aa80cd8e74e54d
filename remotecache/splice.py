"""Splicing CAS chunks into a single blob."""

from __future__ import annotations

import enum
import hashlib
import io
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence, Union

from remotecache.models import Digest, EntryKind
from remotecache.validate import is_valid_hash

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

_MAX_INT64 = 9223372036854775807
_BLOCK_SIZE = 64 * 1024


class StatusCode(enum.IntEnum):
    """RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class RpcError(Exception):
    """An error carrying an RPC status code."""

    def __init__(self, code: StatusCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}"


class DigestFunction(enum.IntEnum):
    """Hash functions that a digest may have been computed with."""

    UNKNOWN = 0
    SHA256 = 1
    SHA1 = 2
    MD5 = 3
    VSO = 4
    SHA384 = 5
    SHA512 = 6
    MURMUR3 = 7
    SHA256TREE = 8
    BLAKE3 = 9


@dataclass
class SpliceBlobRequest:
    """A request to join chunks, in order, into one blob."""

    chunk_digests: list[Optional[Digest]] = field(default_factory=list)
    blob_digest: Optional[Digest] = None
    digest_function: Union[DigestFunction, int] = DigestFunction.UNKNOWN


class _BlockStream(io.RawIOBase):
    """A readable stream over an iterator of byte blocks.

    An RpcError raised while producing blocks is remembered in `error`.
    """

    def __init__(self, blocks: Iterator[bytes]):
        super().__init__()
        self._blocks = blocks
        self._pending = b""
        self.error: Optional[RpcError] = None

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._blocks)
            except StopIteration:
                return 0
            except RpcError as err:
                self.error = err
                raise
        count = min(len(buffer), len(self._pending))
        buffer[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        return count

    def close(self) -> None:
        close = getattr(self._blocks, "close", None)
        if close is not None:
            close()
        super().close()


class SpliceService:
    """Implements SpliceBlob on top of a CAS cache.

    The cache must provide:
      get(kind, hash, size) -> (readable or None, size), raising on error;
      contains(kind, hash, size) -> bool;
      put(kind, hash, size, reader), raising on error.
    """

    def __init__(self, cache: Any, max_cas_blob_size_bytes: int = 0):
        self._cache = cache
        self.max_cas_blob_size_bytes = max_cas_blob_size_bytes

    def _chunk_blocks(self, digest: Digest) -> Iterator[bytes]:
        name = f"{digest.hash}/{digest.size_bytes}"
        try:
            reader, _ = self._cache.get(EntryKind.CAS, digest.hash, digest.size_bytes)
        except Exception as err:
            raise RpcError(
                StatusCode.UNKNOWN, f"SpliceBlob failed to get chunk {name}: {err}"
            ) from err
        if reader is None:
            raise RpcError(
                StatusCode.NOT_FOUND, f"SpliceBlob called with nonexistent blob: {name}"
            )

        copied = 0
        try:
            while True:
                try:
                    block = reader.read(_BLOCK_SIZE)
                except Exception as err:
                    raise RpcError(
                        StatusCode.UNKNOWN,
                        f"SpliceBlob failed to copy chunk {name}: {err}",
                    ) from err
                if not block:
                    break
                copied += len(block)
                yield block
        finally:
            reader.close()

        if copied != digest.size_bytes:
            raise RpcError(
                StatusCode.UNKNOWN,
                f"SpliceBlob copied unpexpected number of bytes ({copied}) "
                f"from chunk {name}",
            )

    def _all_blocks(self, chunks: Sequence[Digest]) -> Iterator[bytes]:
        for chunk in chunks:
            yield from self._chunk_blocks(chunk)

    @staticmethod
    def _check_digest_function(value: Union[DigestFunction, int]) -> None:
        if value in (DigestFunction.UNKNOWN, DigestFunction.SHA256):
            return
        try:
            name = DigestFunction(value).name
        except ValueError:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                f"SpliceBlob called with unrecognised digest function: {int(value)}",
            ) from None
        raise RpcError(
            StatusCode.INVALID_ARGUMENT,
            f"SpliceBlob called with unsupported digest function: {name}",
        )

    @staticmethod
    def _check_chunks(chunks: Sequence[Optional[Digest]]) -> int:
        if not chunks:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                "SpliceBlob called with no SpliceBlobRequest.ChunkDigests",
            )
        total = 0
        for chunk in chunks:
            if chunk is None:
                raise RpcError(
                    StatusCode.INVALID_ARGUMENT,
                    "SpliceBlob called with a nil value in SpliceBlobRequest.ChunkDigests",
                )
            if chunk.size_bytes < 0:
                raise RpcError(
                    StatusCode.INVALID_ARGUMENT,
                    "SpliceBlob called with a negative Digest in "
                    "SpliceBlobRequest.ChunkDigests",
                )
            if chunk.size_bytes == 0 or chunk.hash == EMPTY_SHA256:
                raise RpcError(
                    StatusCode.INVALID_ARGUMENT,
                    "SpliceBlob called with an empty blob in SpliceBlobRequest.ChunkDigests",
                )
            if not is_valid_hash(chunk.hash):
                raise RpcError(
                    StatusCode.INVALID_ARGUMENT,
                    "SpliceBlob called with an invalid digest in "
                    f"SpliceBlobRequest.ChunkDigests: {chunk.hash}/{chunk.size_bytes}",
                )
            total += chunk.size_bytes
            if total > _MAX_INT64:
                raise RpcError(
                    StatusCode.INVALID_ARGUMENT,
                    "Overflow in SpliceBlobRequest.ChunkDigests, does not match "
                    "SpliceBlobRequest.BlobDigest.SizeBytes",
                )
        return total

    def splice_blob(self, request: Optional[SpliceBlobRequest]) -> Digest:
        """Concatenate the request's chunks into a new CAS blob; return its digest."""
        if request is None:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                "SpliceBlob called with nil SpliceBlobRequest",
            )

        self._check_digest_function(request.digest_function)
        chunks: list[Digest] = list(request.chunk_digests)
        chunk_total = self._check_chunks(chunks)

        blob = request.blob_digest
        check_hash = True
        if blob is None:
            # The chunks are read twice, once here and once for the put,
            # to avoid holding the whole blob in memory.
            check_hash = False
            hasher = hashlib.sha256()
            for block in self._all_blocks(chunks):
                hasher.update(block)
            blob = Digest(hasher.hexdigest(), chunk_total)

        if 0 < self.max_cas_blob_size_bytes < blob.size_bytes:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                f"SpliceBlob called to create blob with size {blob.size_bytes}, "
                "which is greater than the max configured blob size "
                f"{self.max_cas_blob_size_bytes}",
            )
        if blob.size_bytes == 0 or blob.hash == EMPTY_SHA256:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT, "SpliceBlob called to create the empty blob?"
            )
        if blob.size_bytes < 0:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                "SpliceBlob called with negative SpliceBlobRequest.BlobDigest.SizeBytes",
            )
        if check_hash and not is_valid_hash(blob.hash):
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                "SpliceBlob called with invalid SpliceBlobRequest.BlobDigest.Hash: "
                f"{blob.hash}",
            )
        if chunk_total != blob.size_bytes:
            raise RpcError(
                StatusCode.INVALID_ARGUMENT,
                "SpliceBlob called with SpliceBlobRequest.ChunkDigests sizes sum to "
                f"{chunk_total}, but SpliceBlobRequest.BlobDigest.SizeBytes was "
                f"{blob.size_bytes}",
            )

        try:
            already_present = bool(
                self._cache.contains(EntryKind.CAS, blob.hash, blob.size_bytes)
            )
        except Exception:
            already_present = False
        if already_present:
            return blob

        stream = _BlockStream(self._all_blocks(chunks))
        try:
            self._cache.put(EntryKind.CAS, blob.hash, blob.size_bytes, stream)
        except Exception as err:
            if stream.error is not None:
                raise stream.error from err
            raise RpcError(
                StatusCode.UNKNOWN,
                f"Failed to splice blob {blob.hash}/{blob.size_bytes}: {err}",
            ) from err
        finally:
            stream.close()
        return blob

    def split_blob(self, request: Any) -> Any:
        """SplitBlob is not supported."""
        raise RpcError(StatusCode.UNIMPLEMENTED, "method SplitBlob not implemented")