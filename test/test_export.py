# test/test_export.py
from __future__ import annotations

import csv
import io

from osmosis_check.actions import confirmation_prompt, open_all
from osmosis_check.export import (
    HEADERS,
    escape_field,
    export_csv,
    urls_as_text,
    write_csv,
)
from osmosis_check.models import (
    CheckFailure,
    CheckSuccess,
    DetectionMethod,
    DetectionResult,
    ErrorKind,
)
from osmosis_check.query import StatusFilter, query


def _ok(url: str, **detection) -> CheckSuccess:
    detection.setdefault("has_video", False)
    detection.setdefault("method", DetectionMethod.NOT_FOUND)
    return CheckSuccess(url=url, timestamp="2024-03-01", detection=DetectionResult(**detection))


def _parse(data: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(data.decode("utf-8-sig"), newline="")))


def test_escape_field():
    assert escape_field(None) == ""
    assert escape_field(3) == "3"
    assert escape_field("plain") == "plain"
    assert escape_field("a,b") == '"a,b"'
    assert escape_field('say "hi"') == '"say ""hi"""'
    assert escape_field("two\nlines") == '"two\nlines"'


def test_bom_header_and_no_trailing_newline():
    data = export_csv([_ok("https://example.org/a")])
    assert data.startswith(b"\xef\xbb\xbf")
    text = data.decode("utf-8-sig")
    assert text.split("\n")[0] == ",".join(HEADERS)
    assert not text.endswith("\n")


def test_row_values():
    record = _ok(
        "https://example.org/v",
        has_video=True,
        method=DetectionMethod.PLAYBACK_CONTROL,
        playback_control_count=2,
        video_tag_count=1,
        iframe_count=3,
        youtube_embed_count=0,
        playback_snippet="<button>",
    )
    failure = CheckFailure(
        url="https://example.org/e", timestamp="2024-03-01", kind=ErrorKind.TIMEOUT, message="late"
    )
    rows = _parse(export_csv([record, failure]))
    assert rows[1] == [
        "https://example.org/v",
        "Yes",
        "Success",
        "playback-control-marker",
        "2024-03-01",
        "2",
        "1",
        "3",
        "0",
        "<button>",
    ]
    assert rows[2] == [
        "https://example.org/e",
        "No",
        "Error: late",
        "error",
        "2024-03-01",
        "0",
        "0",
        "0",
        "0",
        "",
    ]


def test_awkward_values_survive_a_csv_reader():
    url = 'https://example.org/a,b?q="x"'
    snippet = '<button class="playback-speed-button"\n data-x="1,2">'
    record = _ok(
        url,
        has_video=True,
        method=DetectionMethod.PLAYBACK_CONTROL,
        playback_control_count=1,
        playback_snippet=snippet,
    )
    rows = _parse(export_csv([record]))
    assert len(rows) == 2
    assert rows[1][0] == url
    assert rows[1][9] == snippet


def test_not_found_scenario():
    records = [_ok("https://example.org/a"), _ok("https://example.org/a?note")]
    assert len(query(records, StatusFilter.NO_VIDEO)) == 2
    assert query(records, StatusFilter.HAS_VIDEO) == []
    rows = _parse(export_csv(records))
    assert len(rows) == 3


def test_write_csv(tmp_path):
    out = write_csv([_ok("https://example.org/a")], tmp_path / "sub" / "osmosis_results.csv")
    assert out.read_bytes().startswith(b"\xef\xbb\xbf")


def test_urls_as_text():
    assert urls_as_text([_ok("a"), _ok("b")]) == "a\nb"
    assert urls_as_text([]) == ""


# --- bulk open ---------------------------------------------------------------


def test_open_all_asks_with_count_and_opens_each():
    opened, prompts = [], []

    def confirm(msg: str) -> bool:
        prompts.append(msg)
        return True

    n = open_all([_ok("a"), _ok("b")], confirm, opener=opened.append)
    assert n == 2
    assert opened == ["a", "b"]
    assert prompts == [confirmation_prompt(2)]
    assert "2" in prompts[0]


def test_open_all_declined_opens_nothing():
    opened = []
    assert open_all([_ok("a")], lambda msg: False, opener=opened.append) == 0
    assert opened == []


def test_open_all_empty_does_not_ask():
    def confirm(msg: str) -> bool:
        raise AssertionError("should not ask")

    assert open_all([], confirm) == 0
