"""Data types shared by the cache: entry kinds, digests and action results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class EntryKind(enum.Enum):
    """The kind of a cache entry."""

    AC = "ac"
    CAS = "cas"
    RAW = "raw"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Digest:
    """A content digest: a lower case hex SHA256 hash and a size in bytes."""

    hash: str
    size_bytes: int = 0


@dataclass
class OutputFile:
    """A file produced by an action."""

    path: str = ""
    digest: Optional[Digest] = None
    is_executable: bool = False
    contents: bytes = b""


@dataclass
class OutputDirectory:
    """A directory produced by an action, described by a Tree digest."""

    path: str = ""
    tree_digest: Optional[Digest] = None


@dataclass
class OutputSymlink:
    """A symbolic link produced by an action."""

    path: str = ""
    target: str = ""


@dataclass
class ExecutedActionMetadata:
    """Details about how an action was executed."""

    worker: str = ""


@dataclass
class ActionResult:
    """The result of executing an action, as stored in the action cache."""

    output_files: list[Optional[OutputFile]] = field(default_factory=list)
    output_directories: list[Optional[OutputDirectory]] = field(default_factory=list)
    output_file_symlinks: list[Optional[OutputSymlink]] = field(default_factory=list)
    output_symlinks: list[Optional[OutputSymlink]] = field(default_factory=list)
    output_directory_symlinks: list[Optional[OutputSymlink]] = field(
        default_factory=list
    )
    exit_code: int = 0
    stdout_raw: bytes = b""
    stdout_digest: Optional[Digest] = None
    stderr_raw: bytes = b""
    stderr_digest: Optional[Digest] = None
    execution_metadata: Optional[ExecutedActionMetadata] = None