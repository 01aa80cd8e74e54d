import os

import pytest

from remotecache.tempfile_creator import TempfileCreator


def test_tempfile_creator(tmp_path):
    creator = TempfileCreator()
    base = os.path.join(tmp_path, "foo")
    handle, random = creator.create(base, False)
    with handle:
        assert random != ""
        assert random in handle.name
        assert handle.name.startswith(base)
        assert os.path.exists(handle.name)


def test_suffix_is_nine_digits_and_deterministic():
    a = TempfileCreator(seed=12345)
    b = TempfileCreator(seed=12345)
    suffixes_a = [a.random_suffix() for _ in range(20)]
    suffixes_b = [b.random_suffix() for _ in range(20)]
    assert suffixes_a == suffixes_b
    assert all(len(s) == 9 and s.isdigit() for s in suffixes_a)


def test_legacy_suffix(tmp_path):
    handle, random = TempfileCreator().create(os.path.join(tmp_path, "x"), True)
    with handle:
        assert handle.name.endswith(f"-{random}.v1")


def test_collision_is_retried(tmp_path):
    base = os.path.join(tmp_path, "blob")
    twin = TempfileCreator(seed=7)
    first = twin.random_suffix()
    second = twin.random_suffix()
    open(f"{base}-{first}", "wb").close()

    handle, random = TempfileCreator(seed=7).create(base)
    with handle:
        assert random == second
        assert handle.name == f"{base}-{second}"


def test_written_data_round_trips(tmp_path):
    handle, _ = TempfileCreator().create(os.path.join(tmp_path, "d"))
    with handle:
        handle.write(b"payload")
        name = handle.name
    with open(name, "rb") as f:
        assert f.read() == b"payload"


def test_missing_directory_raises(tmp_path):
    base = os.path.join(tmp_path, "missing", "foo")
    with pytest.raises(OSError, match="unexpected error opening temp file"):
        TempfileCreator().create(base)