# osmosis_check/classifier.py
"""
Tiered video detection over raw page HTML.

Tier 1 reads the Next.js ``__NEXT_DATA__`` JSON block and trusts the page's
declared content type. Tier 2 falls back to markup signals, most
template-specific first:

1. the playback-speed button of the site's own player,
2. an HTML5 ``<video`` tag,
3. a YouTube embed URL.

Diagnostic marker counts are always computed so that the export shows why a
page was (or was not) flagged.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from osmosis_check.models import DetectionMethod, DetectionResult

log = logging.getLogger(__name__)

NEXT_DATA_ID = "__NEXT_DATA__"
NEXT_DATA_TYPE = "application/json"
VIDEO_TYPENAME = "Video"

PLAYBACK_MARKER = "playback-speed-button"
VIDEO_TAG_MARKER = "<video"
IFRAME_MARKER = "<iframe"
YOUTUBE_EMBED_MARKER = "youtube.com/embed/"

# props.pageProps.page.content.__typename
_TYPENAME_PATH = ("props", "pageProps", "page", "content", "__typename")


def _dig(data: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def extract_content_type(html: str) -> str | None:
    """
    Return the content ``__typename`` declared in the page's structured data.

    Returns None when the block is absent, is not valid JSON, or lacks the
    field. Parse problems are never raised to the caller.
    """
    if NEXT_DATA_ID not in html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    tag = soup.find("script", attrs={"id": NEXT_DATA_ID, "type": NEXT_DATA_TYPE})
    if tag is None or not tag.string:
        return None
    try:
        data = json.loads(tag.string)
    except ValueError as e:
        log.debug("Malformed %s block: %s", NEXT_DATA_ID, e)
        return None
    content_type = _dig(data, _TYPENAME_PATH)
    if content_type is None or content_type == "":
        return None
    return str(content_type)


def count_markers(html: str) -> dict[str, int]:
    """Case-sensitive, non-overlapping literal counts of each diagnostic marker."""
    return {
        "playback_control_count": html.count(PLAYBACK_MARKER),
        "video_tag_count": html.count(VIDEO_TAG_MARKER),
        "iframe_count": html.count(IFRAME_MARKER),
        "youtube_embed_count": html.count(YOUTUBE_EMBED_MARKER),
    }


def extract_playback_snippet(html: str) -> str | None:
    """
    Return the tag enclosing the first playback marker, e.g.
    ``<button class="playback-speed-button">``, or None when the marker is
    not inside a ``<...>`` tag (for example when it appears in text content).
    """
    idx = html.find(PLAYBACK_MARKER)
    if idx == -1:
        return None
    start = html.rfind("<", 0, idx)
    if start == -1:
        return None
    # a tag that closed before the marker does not contain it
    if html.rfind(">", start, idx) != -1:
        return None
    end = html.find(">", idx + len(PLAYBACK_MARKER))
    if end == -1:
        return None
    return html[start : end + 1]


def classify(html: str) -> DetectionResult:
    """Decide whether a page contains a video and which tier said so."""
    has_video = False
    method = DetectionMethod.NOT_FOUND
    structured_type = None
    snippet = None

    content_type = extract_content_type(html)
    if content_type is not None:
        method = DetectionMethod.STRUCTURED_DATA
        structured_type = content_type
        has_video = content_type == VIDEO_TYPENAME

    counts = count_markers(html)

    # A non-video structured type does not block the markup fallbacks.
    if not has_video:
        if counts["playback_control_count"] > 0:
            has_video = True
            method = DetectionMethod.PLAYBACK_CONTROL
            structured_type = None
            snippet = extract_playback_snippet(html)
        elif counts["video_tag_count"] > 0:
            has_video = True
            method = DetectionMethod.HTML5_VIDEO
            structured_type = None
        elif counts["youtube_embed_count"] > 0:
            has_video = True
            method = DetectionMethod.YOUTUBE_EMBED
            structured_type = None

    return DetectionResult(
        has_video=has_video,
        method=method,
        structured_type=structured_type,
        playback_snippet=snippet,
        **counts,
    )
