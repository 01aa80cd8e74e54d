"""Validation of cache keys and ActionResult messages."""

from __future__ import annotations

import re
from typing import Optional

from remotecache.models import ActionResult, Digest

_HASH_KEY_RE = re.compile(r"[a-f0-9]{64}")


class ValidationError(ValueError):
    """Raised when an ActionResult or digest is invalid."""


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def is_valid_hash(value: str) -> bool:
    """Return True if value is a lower case hex SHA256 hash."""
    return isinstance(value, str) and _HASH_KEY_RE.fullmatch(value) is not None


def _check_digest(digest: Optional[Digest]) -> None:
    if digest is None:
        return
    if digest.size_bytes < 0:
        raise ValidationError("digest has negative SizeBytes")
    if not is_valid_hash(digest.hash):
        raise ValidationError(f"invalid hash: {_quote(digest.hash)}")


def _check_symlinks(symlinks, field_name: str, kind: str) -> None:
    for link in symlinks:
        if link is None:
            raise ValidationError(f"nil *OutputSymlink in {field_name}")
        if link.path == "":
            raise ValidationError(f"empty path in {field_name}")
        if link.target == "":
            raise ValidationError(f"empty target in {field_name}")
        if link.path.startswith("/"):
            raise ValidationError(f"absolute path in {kind}: {_quote(link.path)}")


def validate_action_result(action_result: Optional[ActionResult]) -> None:
    """Check the immediate fields of an ActionResult, not its dependent blobs.

    Raises ValidationError on the first problem found.
    """
    if action_result is None:
        raise ValidationError("nil *ActionResult")

    for output in action_result.output_files:
        if output is None:
            raise ValidationError("nil output file")
        if output.path == "":
            raise ValidationError("empty path")
        if output.path.startswith("/"):
            raise ValidationError(f"absolute path in output file: {_quote(output.path)}")
        if output.digest is None:
            raise ValidationError(f"nil Digest for path {_quote(output.path)}")
        try:
            _check_digest(output.digest)
        except ValidationError as err:
            raise ValidationError(
                f"invalid Digest for path {_quote(output.path)}: {err}"
            ) from err

    for directory in action_result.output_directories:
        if directory is None:
            raise ValidationError("nil output directory")
        if directory.path.startswith("/"):
            raise ValidationError(
                f"absolute path in output directory: {_quote(directory.path)}"
            )
        if directory.tree_digest is None:
            raise ValidationError(
                f"nil tree digest pointer for output directory: {_quote(directory.path)}"
            )
        try:
            _check_digest(directory.tree_digest)
        except ValidationError as err:
            raise ValidationError(
                f"invalid TreeDigest for path {_quote(directory.path)}: {err}"
            ) from err

    _check_symlinks(
        action_result.output_file_symlinks, "OutputFileSymlinks", "output file symlink"
    )
    _check_symlinks(action_result.output_symlinks, "OutputSymlinks", "output symlink")
    _check_symlinks(
        action_result.output_directory_symlinks,
        "OutputDirectorySymlinks",
        "output directory symlink",
    )

    for name, digest in (
        ("StdoutDigest", action_result.stdout_digest),
        ("StderrDigest", action_result.stderr_digest),
    ):
        try:
            _check_digest(digest)
        except ValidationError as err:
            raise ValidationError(f"invalid {name}: {err}") from err