# osmosis_check/export.py
"""
CSV export of check results.

The file is meant to be opened directly in spreadsheet tools, so it starts
with a UTF-8 byte-order mark. Fields are quoted only when they contain a
comma, a double quote or a newline.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from osmosis_check.models import CheckRecord

log = logging.getLogger(__name__)

BOM = "\ufeff"

HEADERS = [
    "URL",
    "Has Video",
    "Status",
    "Detection Method",
    "Timestamp",
    "Playback Speed Button Count",
    "Video Tag Count",
    "iFrame Count",
    "YouTube Embed Count",
    "Playback Speed Button Element",
]


def escape_field(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        text = '"' + text.replace('"', '""') + '"'
    return text


def record_row(record: CheckRecord) -> list[Any]:
    d = record.detection
    return [
        record.url,
        "Yes" if record.has_video else "No",
        record.status,
        record.method_label,
        record.timestamp,
        d.playback_control_count,
        d.video_tag_count,
        d.iframe_count,
        d.youtube_embed_count,
        d.playback_snippet,
    ]


def export_csv(records: Sequence[CheckRecord]) -> bytes:
    """Serialize records to CSV bytes: BOM, header row, one row per record."""
    lines = [",".join(HEADERS)]
    lines.extend(",".join(escape_field(v) for v in record_row(r)) for r in records)
    return (BOM + "\n".join(lines)).encode("utf-8")


def write_csv(records: Sequence[CheckRecord], path: str | Path) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(export_csv(records))
    log.info("Wrote %d row(s) to %s", len(records), out_path)
    return out_path


def urls_as_text(records: Iterable[CheckRecord]) -> str:
    """Newline-joined URLs, for pasting the current selection elsewhere."""
    return "\n".join(r.url for r in records)
