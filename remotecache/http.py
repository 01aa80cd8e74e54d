"""Request URL parsing, status page data and worker metadata for the HTTP cache."""

from __future__ import annotations

import dataclasses
import json
import re
from dataclasses import dataclass

from remotecache.models import ActionResult, EntryKind, ExecutedActionMetadata

_BLOB_NAME_SHA256 = re.compile(r"/?(.*/)?(ac/|cas/)([a-f0-9]{64})")

_HTML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    "'": "&#39;",
    '"': "&#34;",
}


class RequestURLError(ValueError):
    """Raised when a request path does not name a cache blob."""


def _escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(char, char) for char in text)


@dataclass
class StatusPageData:
    """Statistics reported by the status page."""

    curr_size: int = 0
    uncompressed_size: int = 0
    reserved_size: int = 0
    max_size: int = 0
    num_files: int = 0
    server_time: int = 0
    git_commit: str = ""
    git_tags: str = ""
    num_goroutines: int = 0

    def to_json(self) -> str:
        """Return the status as an indented JSON document ending in a newline."""
        document = {
            "CurrSize": self.curr_size,
            "UncompressedSize": self.uncompressed_size,
            "ReservedSize": self.reserved_size,
            "MaxSize": self.max_size,
            "NumFiles": self.num_files,
            "ServerTime": self.server_time,
            "GitCommit": self.git_commit,
            "GitTags": self.git_tags,
            "NumGoroutines": self.num_goroutines,
        }
        return json.dumps(document, indent=" ") + "\n"


def parse_request_url(url: str, validate_ac: bool) -> tuple[EntryKind, str, str]:
    """Parse a request path into (kind, hash, instance).

    Paths look like [/][instance/](ac/|cas/)<sha256>. AC entries are
    reported as RAW unless validate_ac is true.
    """
    match = _BLOB_NAME_SHA256.fullmatch(url)
    if match is None or "\n" in url:
        raise RequestURLError(
            "resource name must be a SHA256 hash in hex, "
            f"got '{_escape_html(url)}'"
        )

    instance_part, kind_part, hash_ = match.groups()
    instance = (instance_part or "")
    if instance.endswith("/"):
        instance = instance[:-1]

    if kind_part == "cas/":
        return EntryKind.CAS, hash_, instance
    if validate_ac:
        return EntryKind.AC, hash_, instance
    return EntryKind.RAW, hash_, instance


def blob_path(kind: EntryKind, hash: str) -> str:
    """Return the canonical path of a blob, for log messages."""
    return f"/{kind}/{hash}"


def add_worker_metadata(action_result: ActionResult, remote_addr: str) -> ActionResult:
    """Return action_result with its execution metadata naming a worker.

    An existing non-empty worker is kept. Otherwise the worker is set to
    remote_addr, or "unknown" if that is empty. The argument is not modified.
    """
    metadata = action_result.execution_metadata
    if metadata is not None and metadata.worker != "":
        return action_result

    worker = remote_addr if remote_addr else "unknown"
    if metadata is None:
        new_metadata = ExecutedActionMetadata(worker=worker)
    else:
        new_metadata = dataclasses.replace(metadata, worker=worker)
    return dataclasses.replace(action_result, execution_metadata=new_metadata)