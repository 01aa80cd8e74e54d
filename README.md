# remotecache

Building blocks for a remote build cache that follows the layout used by
Bazel and other REAPI clients: a content-addressable store (CAS) of blobs
keyed by their SHA-256 hash, and an action cache (AC) of `ActionResult`
records.

## What is in the package

- `remotecache.models` – `EntryKind` (`AC`, `CAS`, `RAW`), `Digest`,
  `ActionResult`, `OutputFile`, `OutputDirectory`, `OutputSymlink` and
  `ExecutedActionMetadata`, all plain dataclasses.
- `remotecache.validate` – `is_valid_hash` (64 lower case hex characters)
  and `validate_action_result`, which raises `ValidationError` on the first
  problem it finds in an `ActionResult`'s own fields.
- `remotecache.http` – `parse_request_url` turns paths such as
  `/cas/<sha256>` or `instance/ac/<sha256>` into `(kind, hash, instance)`,
  raising `RequestURLError` otherwise; AC paths come back as `RAW` unless
  `validate_ac` is true. Also `blob_path`, `add_worker_metadata` (fills in
  `execution_metadata.worker` on a copy of the result) and `StatusPageData`
  with `to_json()`.
- `remotecache.splice` – `SpliceService.splice_blob` joins existing CAS
  chunks into a new blob, checking digest function, chunk sizes, hashes,
  overflow and the size limit, and raises `RpcError` carrying a
  `StatusCode`. `split_blob` always raises `UNIMPLEMENTED`.
- `remotecache.sha256verifier` – `Sha256Verifier` forwards writes to a sink
  and, on `close()`, checks the total size and SHA-256, raising
  `VerificationError` on a mismatch. It is also a context manager.
- `remotecache.tempfile_creator` – `TempfileCreator.create(base, legacy)`
  exclusively creates `<base>-<random>` (plus `.v1` when `legacy`) with the
  setgid bit set to mark it incomplete; `FINAL_MODE` is the mode to set once
  the file is complete.
- `remotecache.idle` – `IdleTimer` calls `on_idle` once more than `timeout`
  seconds pass without `reset()`; `stop()` ends it without firing.
- `remotecache.idle_interceptor` – `IdleResettingHandler` resets an idle
  timer before each call to a wrapped handler (`wrap(handler)` or
  `handler_wrapper(handler, *args)`).
- `remotecache.backendproxy` – `start_uploaders` starts an `UploadQueue` of
  worker threads; `submit` returns `False` when the queue is full, `join`
  waits for all queued uploads.
- `remotecache.flags` – `get_cli_flags` describes the server's options as
  `Flag` objects, each with `help_string()`; `find_flag` looks one up.
- `remotecache.usage` – `wrap`, `wrap_line`, `get_console_width` (from
  `$COLUMNS`, else `tput cols`), `render_help` and `print_help`.
- `remotecache.rlimit` – `raise_open_file_limit` raises the soft open-file
  limit to the hard limit (capped by `kern.maxfilesperproc` on macOS).
- `remotecache.zstdpool` – per-thread zstd `get_compressor`,
  `get_decompressor`, `compress` and `decompress`.
- `remotecache.testutils` – `random_data_and_hash`,
  `random_data_and_digest` and `silent_logger`.

## Installing

The only runtime dependency is `zstandard`. The `test` extra adds `pytest`.

## Examples

Parse a cache URL:

```python
from remotecache.http import parse_request_url, RequestURLError

kind, blob_hash, instance = parse_request_url(
    "prefix/ac/fec3be77b8aa0d307ed840581ded3d114c86f36d4914c81e33a72877020c0603",
    True,
)
# kind is EntryKind.AC, instance == "prefix"

try:
    parse_request_url("invalid/url", True)
except RequestURLError as err:
    print(err)  # resource name must be a SHA256 hash in hex, got 'invalid/url'
```

Validate an `ActionResult`:

```python
from remotecache.models import ActionResult, Digest, OutputFile
from remotecache.validate import validate_action_result, ValidationError

digest = Digest("2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824", 5)
result = ActionResult(output_files=[OutputFile(path="/abs/out", digest=digest)])
try:
    validate_action_result(result)
except ValidationError as err:
    print(err)  # absolute path in output file: "/abs/out"
```

Splice blobs. The cache passed to `SpliceService` needs
`get(kind, hash, size) -> (reader or None, size)`,
`contains(kind, hash, size) -> bool` and `put(kind, hash, size, reader)`:

```python
import io
from remotecache.models import Digest
from remotecache.splice import SpliceBlobRequest, SpliceService

class MemoryCAS:
    def __init__(self):
        self.blobs = {}
    def get(self, kind, hash, size):
        data = self.blobs.get(hash)
        return (None, -1) if data is None else (io.BytesIO(data), len(data))
    def contains(self, kind, hash, size):
        return hash in self.blobs
    def put(self, kind, hash, size, reader):
        self.blobs[hash] = reader.read()

hello = Digest("2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824", 5)
world = Digest("486ea46224d1bb4fb680f34f7c9ad96a8f24ec88be73ea8e5a6c65260e9cb8a7", 5)
cas = MemoryCAS()
cas.blobs[hello.hash] = b"hello"
cas.blobs[world.hash] = b"world"

spliced = SpliceService(cas).splice_blob(SpliceBlobRequest(chunk_digests=[hello, world]))
# spliced.hash == "936a185caaa266bb9cbe981e9e05cb78cd732b0b3280eb944412bb6f8f8f07af"
```

Write a blob while checking its digest:

```python
import io
from remotecache.sha256verifier import Sha256Verifier

sink = io.BytesIO()
expected = "9f64a747e1b97f131fabb6b447296c9b6f0201e79fb3c5356e6c77e89b6a806a"
with Sha256Verifier(expected, 4, sink) as verifier:
    verifier.write(bytes([1, 2, 3, 4]))
```

Render help text at a fixed width:

```python
from remotecache.flags import get_cli_flags
from remotecache.usage import render_help, wrap_line

flags = get_cli_flags(
    ["go"],
    {"access_key": "access_key", "aws_credentials_file": "aws_credentials_file",
     "iam_role": "iam_role"},
    {"shared_key": "shared_key", "client_secret": "client_secret",
     "client_certificate": "client_certificate"},
)
print(render_help("remotecache", flags, width=80))
print(wrap_line("the quick brown fox jumped over the lazy dog", 10, "__"))
```

Compress and decompress:

```python
from remotecache.zstdpool import compress, decompress

assert decompress(compress(b"hello")) == b"hello"
```

## What the package does not do

It is a library of parts, not a running cache. It has no HTTP or gRPC
server, no on-disk blob store or eviction, no proxy backends (S3, GCS,
Azure, HTTP or gRPC), no authentication, and no command to start. The flag
descriptions from `get_cli_flags` are for help text only; nothing parses a
command line with them.

## Platform notes

`raise_open_file_limit` uses POSIX resource limits and returns `None` where
they are unavailable.