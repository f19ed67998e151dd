# osmosis_check/query.py
# Filtering, sorting and summary counts over a snapshot of CheckRecords.

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from osmosis_check.models import CheckRecord


class StatusFilter(str, enum.Enum):
    ALL = "all"
    HAS_VIDEO = "video"
    NO_VIDEO = "no-video"
    ERROR = "error"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class SortKey(str, enum.Enum):
    """Sortable columns, in CSV column order."""

    URL = "url"
    HAS_VIDEO = "has_video"
    STATUS = "status"
    DETECTION_METHOD = "detection_method"
    TIMESTAMP = "timestamp"
    PLAYBACK_CONTROL_COUNT = "playback_control_count"
    VIDEO_TAG_COUNT = "video_tag_count"
    IFRAME_COUNT = "iframe_count"
    YOUTUBE_EMBED_COUNT = "youtube_embed_count"
    PLAYBACK_SNIPPET = "playback_snippet"


# Each extractor returns a value with a total order: str, int or bool.
_SORT_FIELDS: Dict[SortKey, Callable[[CheckRecord], Any]] = {
    SortKey.URL: lambda r: r.url,
    SortKey.HAS_VIDEO: lambda r: r.has_video,
    SortKey.STATUS: lambda r: r.status,
    SortKey.DETECTION_METHOD: lambda r: r.method_label,
    SortKey.TIMESTAMP: lambda r: r.timestamp,
    SortKey.PLAYBACK_CONTROL_COUNT: lambda r: r.detection.playback_control_count,
    SortKey.VIDEO_TAG_COUNT: lambda r: r.detection.video_tag_count,
    SortKey.IFRAME_COUNT: lambda r: r.detection.iframe_count,
    SortKey.YOUTUBE_EMBED_COUNT: lambda r: r.detection.youtube_embed_count,
    SortKey.PLAYBACK_SNIPPET: lambda r: r.detection.playback_snippet or "",
}


def matches_status(record: CheckRecord, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.HAS_VIDEO:
        return record.has_video
    if status_filter is StatusFilter.NO_VIDEO:
        # errors are their own bucket, never "no video"
        return not record.has_video and not record.is_error
    if status_filter is StatusFilter.ERROR:
        return record.is_error
    return True


def query(
    records: Iterable[CheckRecord],
    status_filter: StatusFilter = StatusFilter.ALL,
    url_substring: str = "",
    sort_key: SortKey | None = None,
    direction: SortDirection = SortDirection.ASC,
) -> List[CheckRecord]:
    """
    Filter then optionally sort records, returning a new list.

    Sorting is stable in both directions: records with equal keys keep their
    input order even when sorting descending.
    """
    needle = url_substring.lower()
    selected = [
        r
        for r in records
        if matches_status(r, status_filter) and needle in r.url.lower()
    ]
    if sort_key is None:
        return selected
    return sorted(
        selected,
        key=_SORT_FIELDS[sort_key],
        reverse=direction is SortDirection.DESC,
    )


@dataclass
class SortState:
    """
    Column-header sort toggle: selecting the active key again flips the
    direction, selecting a different key starts ascending.
    """

    key: SortKey | None = None
    direction: SortDirection = SortDirection.ASC

    def select(self, key: SortKey) -> "SortState":
        if self.key is key:
            self.direction = self.direction.flipped()
        else:
            self.key = key
            self.direction = SortDirection.ASC
        return self

    def apply(
        self,
        records: Iterable[CheckRecord],
        status_filter: StatusFilter = StatusFilter.ALL,
        url_substring: str = "",
    ) -> List[CheckRecord]:
        return query(records, status_filter, url_substring, self.key, self.direction)


@dataclass(frozen=True)
class Summary:
    total: int
    with_video: int
    without_video: int
    errors: int

    def _percent(self, count: int) -> float:
        return count / self.total * 100 if self.total else 0.0

    @property
    def with_video_percent(self) -> float:
        return self._percent(self.with_video)

    @property
    def without_video_percent(self) -> float:
        return self._percent(self.without_video)


def summarize(records: Iterable[CheckRecord]) -> Summary:
    items = list(records)
    return Summary(
        total=len(items),
        with_video=sum(1 for r in items if matches_status(r, StatusFilter.HAS_VIDEO)),
        without_video=sum(1 for r in items if matches_status(r, StatusFilter.NO_VIDEO)),
        errors=sum(1 for r in items if matches_status(r, StatusFilter.ERROR)),
    )
