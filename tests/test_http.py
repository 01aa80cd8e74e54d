import json

import pytest

from remotecache.http import (
    RequestURLError,
    StatusPageData,
    add_worker_metadata,
    blob_path,
    parse_request_url,
)
from remotecache.models import ActionResult, EntryKind, ExecutedActionMetadata

A_SHA256 = "fec3be77b8aa0d307ed840581ded3d114c86f36d4914c81e33a72877020c0603"


def test_rejects_invalid_url():
    with pytest.raises(RequestURLError):
        parse_request_url("invalid/url", True)


def test_parses_cas_url():
    assert parse_request_url("cas/" + A_SHA256, True) == (EntryKind.CAS, A_SHA256, "")


def test_parses_ac_url():
    assert parse_request_url("ac/" + A_SHA256, True) == (EntryKind.AC, A_SHA256, "")


def test_parses_ac_url_with_prefix():
    assert parse_request_url("prefix/ac/" + A_SHA256, True) == (
        EntryKind.AC,
        A_SHA256,
        "prefix",
    )


def test_ac_url_without_validation_is_raw():
    assert parse_request_url("prefix/ac/" + A_SHA256, False) == (
        EntryKind.RAW,
        A_SHA256,
        "prefix",
    )


def test_prefix_with_slashes():
    assert parse_request_url("prefix/with/slashes/ac/" + A_SHA256, False) == (
        EntryKind.RAW,
        A_SHA256,
        "prefix/with/slashes",
    )


def test_leading_slash_accepted():
    assert parse_request_url("/cas/" + A_SHA256, False) == (EntryKind.CAS, A_SHA256, "")


@pytest.mark.parametrize(
    "url",
    [
        "/cas/" + A_SHA256.upper(),
        "/cas/" + A_SHA256[1:],
        "/cas/" + A_SHA256 + "a",
        "/cas/" + A_SHA256 + "\n",
        "/blobs/" + A_SHA256,
        "/status",
    ],
)
def test_rejects_bad_paths(url):
    with pytest.raises(RequestURLError):
        parse_request_url(url, True)


def test_error_message_escapes_html():
    with pytest.raises(RequestURLError) as info:
        parse_request_url("<b>'x'&", True)
    assert str(info.value) == (
        "resource name must be a SHA256 hash in hex, got '&lt;b&gt;&#39;x&#39;&amp;'"
    )


def test_blob_path():
    assert blob_path(EntryKind.CAS, A_SHA256) == "/cas/" + A_SHA256
    assert blob_path(EntryKind.AC, "abc") == "/ac/abc"


def test_status_page_json_round_trip():
    data = StatusPageData(max_size=2048, num_files=0, git_commit="abc")
    text = data.to_json()
    assert text.endswith("\n")
    decoded = json.loads(text)
    assert decoded["NumFiles"] == 0
    assert decoded["MaxSize"] == 2048
    assert decoded["GitCommit"] == "abc"
    assert set(decoded) == {
        "CurrSize",
        "UncompressedSize",
        "ReservedSize",
        "MaxSize",
        "NumFiles",
        "ServerTime",
        "GitCommit",
        "GitTags",
        "NumGoroutines",
    }


def test_status_page_json_indent():
    text = StatusPageData().to_json()
    assert text.splitlines()[1] == ' "CurrSize": 0,'


def test_empty_action_result_gains_metadata():
    original = ActionResult()
    result = add_worker_metadata(original, "192.0.2.1:1234")
    assert result.execution_metadata == ExecutedActionMetadata(worker="192.0.2.1:1234")
    assert original.execution_metadata is None


def test_existing_worker_kept():
    original = ActionResult(execution_metadata=ExecutedActionMetadata(worker="w1"))
    result = add_worker_metadata(original, "192.0.2.1:1234")
    assert result.execution_metadata.worker == "w1"


def test_empty_worker_filled_in():
    original = ActionResult(exit_code=3, execution_metadata=ExecutedActionMetadata())
    result = add_worker_metadata(original, "host:80")
    assert result.execution_metadata.worker == "host:80"
    assert result.exit_code == 3


def test_empty_address_gives_unknown_worker():
    result = add_worker_metadata(ActionResult(), "")
    assert result.execution_metadata.worker == "unknown"