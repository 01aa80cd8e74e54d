import pytest

from remotecache.models import (
    ActionResult,
    Digest,
    OutputDirectory,
    OutputFile,
    OutputSymlink,
)
from remotecache.validate import ValidationError, is_valid_hash, validate_action_result

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


@pytest.mark.parametrize(
    "action_result, message",
    [
        (None, "nil *ActionResult"),
        (ActionResult(output_files=[None]), "nil output file"),
        (
            ActionResult(output_file_symlinks=[None]),
            "nil *OutputSymlink in OutputFileSymlinks",
        ),
        (ActionResult(output_symlinks=[None]), "nil *OutputSymlink in OutputSymlinks"),
        (
            ActionResult(output_directory_symlinks=[None]),
            "nil *OutputSymlink in OutputDirectorySymlinks",
        ),
    ],
)
def test_nil_pointers(action_result, message):
    with pytest.raises(ValidationError) as info:
        validate_action_result(action_result)
    assert str(info.value) == message


def test_is_valid_hash():
    assert is_valid_hash(EMPTY_SHA256)
    assert not is_valid_hash(EMPTY_SHA256.upper())
    assert not is_valid_hash(EMPTY_SHA256 + "a")
    assert not is_valid_hash(EMPTY_SHA256[1:])
    assert not is_valid_hash(EMPTY_SHA256 + "\n")


def test_absolute_output_file_path_rejected():
    ar = ActionResult(output_files=[OutputFile("/abs", Digest(EMPTY_SHA256, 0))])
    with pytest.raises(ValidationError, match="absolute path in output file"):
        validate_action_result(ar)


def test_empty_output_file_path_rejected():
    ar = ActionResult(output_files=[OutputFile("", Digest(EMPTY_SHA256, 0))])
    with pytest.raises(ValidationError, match="^empty path$"):
        validate_action_result(ar)


def test_output_file_without_digest_rejected():
    ar = ActionResult(output_files=[OutputFile("out", None)])
    with pytest.raises(ValidationError, match="nil Digest for path"):
        validate_action_result(ar)


def test_negative_digest_is_wrapped():
    ar = ActionResult(output_files=[OutputFile("out", Digest(EMPTY_SHA256, -1))])
    with pytest.raises(ValidationError) as info:
        validate_action_result(ar)
    assert "digest has negative SizeBytes" in str(info.value)
    assert isinstance(info.value.__cause__, ValidationError)


def test_bad_tree_digest_rejected():
    ar = ActionResult(output_directories=[OutputDirectory("d", Digest("xyz", 1))])
    with pytest.raises(ValidationError, match="invalid TreeDigest"):
        validate_action_result(ar)


def test_missing_tree_digest_rejected():
    ar = ActionResult(output_directories=[OutputDirectory("d", None)])
    with pytest.raises(ValidationError, match="nil tree digest pointer"):
        validate_action_result(ar)


def test_symlink_empty_target_rejected():
    ar = ActionResult(output_symlinks=[OutputSymlink("a", "")])
    with pytest.raises(ValidationError, match="empty target in OutputSymlinks"):
        validate_action_result(ar)


def test_invalid_stderr_digest_rejected():
    ar = ActionResult(stderr_digest=Digest("nothex", 3))
    with pytest.raises(ValidationError, match="invalid StderrDigest"):
        validate_action_result(ar)


def test_valid_result_passes_and_is_unchanged():
    ar = ActionResult(
        output_files=[OutputFile("out", Digest(EMPTY_SHA256, 0))],
        output_symlinks=[OutputSymlink("link", "out")],
        stdout_digest=Digest(EMPTY_SHA256, 0),
    )
    assert validate_action_result(ar) is None
    assert ar.output_files[0].digest == Digest(EMPTY_SHA256, 0)