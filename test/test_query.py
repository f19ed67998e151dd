# test/test_query.py
from __future__ import annotations

import pytest

from osmosis_check.models import (
    CheckFailure,
    CheckSuccess,
    DetectionMethod,
    DetectionResult,
    ErrorKind,
)
from osmosis_check.query import (
    SortDirection,
    SortKey,
    SortState,
    StatusFilter,
    query,
    summarize,
)

# --- helpers ---------------------------------------------------------------


def _ok(url: str, has_video: bool = False, videos: int = 0, ts: str = "t") -> CheckSuccess:
    method = DetectionMethod.HTML5_VIDEO if has_video else DetectionMethod.NOT_FOUND
    return CheckSuccess(
        url=url,
        timestamp=ts,
        detection=DetectionResult(has_video=has_video, method=method, video_tag_count=videos),
    )


def _err(url: str) -> CheckFailure:
    return CheckFailure(url=url, timestamp="t", kind=ErrorKind.TIMEOUT, message="late")


RECORDS = [
    _ok("https://Example.org/Alpha", has_video=True, videos=2),
    _ok("https://example.org/beta"),
    _err("https://example.org/gamma"),
    _ok("https://other.net/delta", has_video=True, videos=1),
    _ok("https://example.org/epsilon"),
]


# --- filtering ---------------------------------------------------------------


def test_all_returns_everything_in_order():
    assert query(RECORDS) == RECORDS


def test_has_video():
    assert [r.url for r in query(RECORDS, StatusFilter.HAS_VIDEO)] == [
        "https://Example.org/Alpha",
        "https://other.net/delta",
    ]


def test_no_video_excludes_errors():
    result = query(RECORDS, StatusFilter.NO_VIDEO)
    assert [r.url for r in result] == [
        "https://example.org/beta",
        "https://example.org/epsilon",
    ]
    assert not any(r.is_error for r in result)


def test_error_filter():
    assert [r.url for r in query(RECORDS, StatusFilter.ERROR)] == ["https://example.org/gamma"]


def test_substring_is_case_insensitive():
    assert [r.url for r in query(RECORDS, url_substring="EXAMPLE.ORG/A")] == [
        "https://Example.org/Alpha"
    ]
    assert len(query(RECORDS, url_substring="example")) == 4


def test_filters_combine():
    result = query(RECORDS, StatusFilter.NO_VIDEO, "eps")
    assert [r.url for r in result] == ["https://example.org/epsilon"]


def test_query_does_not_mutate_input():
    records = list(RECORDS)
    query(records, sort_key=SortKey.URL, direction=SortDirection.DESC)
    assert records == RECORDS


# --- sorting ---------------------------------------------------------------


def test_numeric_sort():
    result = query(RECORDS, sort_key=SortKey.VIDEO_TAG_COUNT, direction=SortDirection.DESC)
    assert [r.detection.video_tag_count for r in result] == [2, 1, 0, 0, 0]


def test_boolean_sort_false_first_and_stable():
    result = query(RECORDS, sort_key=SortKey.HAS_VIDEO)
    assert [r.url for r in result] == [
        "https://example.org/beta",
        "https://example.org/gamma",
        "https://example.org/epsilon",
        "https://Example.org/Alpha",
        "https://other.net/delta",
    ]


def test_descending_keeps_equal_keys_in_input_order():
    records = [_ok("a", ts="1"), _ok("b", ts="2"), _ok("c", ts="1"), _ok("d", ts="2")]
    result = query(records, sort_key=SortKey.TIMESTAMP, direction=SortDirection.DESC)
    assert [r.url for r in result] == ["b", "d", "a", "c"]


def test_status_sort_is_lexicographic():
    result = query(RECORDS, sort_key=SortKey.STATUS)
    assert result[0].is_error  # "Error: ..." < "Success"


def test_snippet_sort_treats_absent_as_empty():
    with_snippet = CheckSuccess(
        url="s",
        timestamp="t",
        detection=DetectionResult(
            has_video=True,
            method=DetectionMethod.PLAYBACK_CONTROL,
            playback_snippet="<button>",
        ),
    )
    result = query([with_snippet, _ok("n")], sort_key=SortKey.PLAYBACK_SNIPPET)
    assert [r.url for r in result] == ["n", "s"]


@pytest.mark.parametrize("key", list(SortKey))
def test_every_key_sorts(key):
    assert len(query(RECORDS, sort_key=key)) == len(RECORDS)


def test_sort_state_toggles_on_same_key_and_resets_on_new_key():
    state = SortState()
    state.select(SortKey.URL)
    assert (state.key, state.direction) == (SortKey.URL, SortDirection.ASC)
    state.select(SortKey.URL)
    assert state.direction is SortDirection.DESC
    state.select(SortKey.URL)
    assert state.direction is SortDirection.ASC
    state.select(SortKey.STATUS)
    assert (state.key, state.direction) == (SortKey.STATUS, SortDirection.ASC)


def test_sort_state_apply_without_key_keeps_order():
    assert SortState().apply(RECORDS, StatusFilter.ALL) == RECORDS


# --- summary ---------------------------------------------------------------


def test_summarize():
    s = summarize(RECORDS)
    assert (s.total, s.with_video, s.without_video, s.errors) == (5, 2, 2, 1)


def test_summary_percentages():
    s = summarize(RECORDS)
    assert s.with_video_percent == pytest.approx(40.0)
    assert s.without_video_percent == pytest.approx(40.0)


def test_summary_percentages_of_empty_log_are_zero():
    s = summarize([])
    assert (s.with_video_percent, s.without_video_percent) == (0.0, 0.0)
