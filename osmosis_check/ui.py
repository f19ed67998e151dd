# osmosis_check/ui.py
# Presentation-only utilities for CLI output.
from __future__ import annotations

from typing import IO, Iterable

from osmosis_check.models import CheckRecord, Progress
from osmosis_check.query import Summary


def _writeln(text: str = "", *, file: IO[str]) -> None:
    file.write(text + "\n")


def render_check_header(total: int, *, file: IO[str]) -> None:
    _writeln(f"Checking {total} URL(s) for videos...", file=file)


def render_progress(progress: Progress, url: str, *, file: IO[str]) -> None:
    _writeln(f"[{progress.current}/{progress.total}] {url}", file=file)


def _verdict(record: CheckRecord) -> str:
    if record.is_error:
        return "ERROR"
    return "VIDEO" if record.has_video else "NONE"


def render_results_section(records: Iterable[CheckRecord], *, file: IO[str]) -> None:
    items = list(records)
    if not items:
        return
    _writeln("\n--- Results ---", file=file)
    for r in items:
        _writeln(f"- [{_verdict(r):<5}] {r.url}", file=file)
        if r.is_error:
            _writeln(f"    {r.status}", file=file)
            continue
        d = r.detection
        _writeln(
            f"    {r.method_label}  playback={d.playback_control_count} "
            f"video={d.video_tag_count} iframe={d.iframe_count} "
            f"youtube={d.youtube_embed_count}",
            file=file,
        )
        if d.playback_snippet:
            _writeln(f"    {d.playback_snippet}", file=file)


def render_summary_line(summary: Summary, *, file: IO[str]) -> None:
    _writeln(
        f"\nTotal: {summary.total}  "
        f"With video: {summary.with_video} ({summary.with_video_percent:.1f}%)  "
        f"Without video: {summary.without_video} ({summary.without_video_percent:.1f}%)  "
        f"Errors: {summary.errors}",
        file=file,
    )
