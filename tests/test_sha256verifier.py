import io

import pytest

from remotecache.sha256verifier import Sha256Verifier, VerificationError

EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
ONE_TO_FOUR = "9f64a747e1b97f131fabb6b447296c9b6f0201e79fb3c5356e6c77e89b6a806a"


class _Buffer(io.BytesIO):
    def __init__(self):
        super().__init__()
        self.closed_calls = 0

    def close(self):
        self.closed_calls += 1


@pytest.mark.parametrize(
    "size, expected_hash, data, success",
    [
        (0, EMPTY, b"", True),
        (0, EMPTY, bytes([0]), False),
        (0, EMPTY[:-1], b"", False),
        (4, ONE_TO_FOUR, bytes([1, 2, 3, 4]), True),
        (3, ONE_TO_FOUR, bytes([1, 2, 3, 4]), False),
        (4, ONE_TO_FOUR, bytes([1, 2, 3, 4, 0]), False),
    ],
)
def test_hash_verification(size, expected_hash, data, success):
    buf = _Buffer()
    verifier = Sha256Verifier(expected_hash, size, buf)
    assert verifier.write(data) == len(data)
    if success:
        verifier.close()
        assert buf.getvalue() == data
        assert buf.closed_calls == 1
    else:
        with pytest.raises(VerificationError):
            verifier.close()
        assert buf.closed_calls == 0


def test_multiple_writes_accumulate():
    buf = _Buffer()
    verifier = Sha256Verifier(ONE_TO_FOUR, 4, buf)
    verifier.write(bytes([1, 2]))
    verifier.write(bytes([3, 4]))
    verifier.close()
    assert buf.getvalue() == bytes([1, 2, 3, 4])


def test_context_manager_verifies():
    buf = _Buffer()
    with pytest.raises(VerificationError, match="expected 4 bytes, got 2"):
        with Sha256Verifier(ONE_TO_FOUR, 4, buf) as verifier:
            verifier.write(bytes([1, 2]))


def test_short_write_raises():
    class _Short:
        def write(self, data):
            return len(data) - 1

        def close(self):
            pass

    verifier = Sha256Verifier(ONE_TO_FOUR, 4, _Short())
    with pytest.raises(OSError, match="short write"):
        verifier.write(bytes([1, 2, 3, 4]))