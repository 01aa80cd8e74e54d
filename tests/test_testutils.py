import hashlib

import pytest

from remotecache.testutils import random_data_and_digest, random_data_and_hash, silent_logger
from remotecache.validate import is_valid_hash

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_empty_blob_hash():
    assert random_data_and_hash(0) == (b"", EMPTY_SHA256)


@pytest.mark.parametrize("size", [1, 5, 1024])
def test_hash_matches_data(size):
    data, hash_ = random_data_and_hash(size)
    assert len(data) == size
    assert hashlib.sha256(data).hexdigest() == hash_
    assert is_valid_hash(hash_)


def test_data_is_random():
    first, _ = random_data_and_hash(64)
    second, _ = random_data_and_hash(64)
    assert len(first) == len(second) == 64
    assert first != second


def test_digest_matches_data():
    data, digest = random_data_and_digest(1024)
    assert digest.size_bytes == len(data) == 1024
    assert digest.hash == hashlib.sha256(data).hexdigest()


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        random_data_and_hash(-1)


def test_silent_logger_prints_nothing(capsys, caplog):
    logger = silent_logger()
    logger.error("should not appear")
    logger.warning("nor this")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
    assert caplog.records == []
    assert logger.propagate is False


def test_silent_logger_is_reused():
    first = silent_logger()
    second = silent_logger()
    assert first is second
    assert len(second.handlers) == 1