# osmosis_check/cli.py
# Defines the command-line interface using argparse.

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import IO, Any, Callable, Sequence

from osmosis_check import __version__
from osmosis_check.actions import open_all
from osmosis_check.api import build_settings, check_urls
from osmosis_check.cache import CacheConfig, FileCache
from osmosis_check.export import urls_as_text, write_csv
from osmosis_check.models import CheckRecord, Progress
from osmosis_check.query import SortDirection, SortKey, StatusFilter, query, summarize
from osmosis_check.runner import parse_url_lines
from osmosis_check.ui import (
    render_check_header,
    render_progress,
    render_results_section,
    render_summary_line,
)

log = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _load_urls(path: str | None, stdin: IO[str]) -> list[str]:
    if not path or path == "-":
        return parse_url_lines(stdin.read())
    p = Path(path)
    if not p.exists():
        log.error("Error: The file specified could not be found: %s", path)
        raise FileNotFoundError(path)
    urls = parse_url_lines(p.read_text(encoding="utf-8"))
    log.info("Loaded %d URLs from %s", len(urls), path)
    return urls


def record_to_dict(record: CheckRecord) -> dict[str, Any]:
    d = record.detection
    return {
        "url": record.url,
        "has_video": record.has_video,
        "status": record.status,
        "timestamp": record.timestamp,
        "detection_method": record.method_label,
        "playback_control_count": d.playback_control_count,
        "video_tag_count": d.video_tag_count,
        "iframe_count": d.iframe_count,
        "youtube_embed_count": d.youtube_embed_count,
        "playback_snippet": d.playback_snippet,
    }


def _human_bytes(n: int) -> str:
    # Compact human-readable bytes
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    v = float(n)
    while v >= 1024 and i < len(units) - 1:
        v /= 1024.0
        i += 1
    # max 2 decimals, strip trailing zeros
    s = f"{v:.2f}".rstrip("0").rstrip(".")
    return f"{s} {units[i]}"


def _init_file_cache(cache_dir: str | None, os_default: bool) -> FileCache:
    cfg = CacheConfig(enabled=True)
    if os_default:
        cfg.directory = "os-default"
    if cache_dir:
        cfg.directory = cache_dir
    return FileCache(cfg)


def _ask_yes_no(stdin: IO[str], stdout: IO[str]) -> Callable[[str], bool]:
    def confirm(message: str) -> bool:
        stdout.write(f"{message} [y/N] ")
        stdout.flush()
        return stdin.readline().strip().lower() in ("y", "yes")

    return confirm


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check which pages in a URL list contain a video.",
        prog="osmosis_check",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging output to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- check ---
    check_parser = subparsers.add_parser(
        "check", help="Fetch each URL through the relays and report video presence."
    )
    check_parser.add_argument(
        "urls_file",
        nargs="?",
        metavar="URLS_FILE",
        help="File with one URL per line. Reads stdin when omitted or '-'.",
    )

    fetch_group = check_parser.add_argument_group("fetch arguments")
    fetch_group.add_argument(
        "--relay",
        dest="relays",
        action="append",
        metavar="TEMPLATE",
        help="Relay URL template with {url} or {url_encoded}. Repeat to set the order.",
    )
    fetch_group.add_argument(
        "--timeout", type=float, metavar="SECONDS", help="Timeout per relay attempt."
    )
    fetch_group.add_argument(
        "--cache",
        dest="use_cache",
        action="store_true",
        default=None,
        help="Reuse page bodies from the on-disk cache.",
    )

    view_group = check_parser.add_argument_group("result arguments")
    view_group.add_argument(
        "--status",
        choices=[f.value for f in StatusFilter],
        default=StatusFilter.ALL.value,
        help="Only keep results in this category.",
    )
    view_group.add_argument(
        "--search", default="", metavar="TEXT", help="Case-insensitive URL filter."
    )
    view_group.add_argument(
        "--sort", choices=[k.value for k in SortKey], help="Column to sort by."
    )
    view_group.add_argument(
        "--desc", action="store_true", help="Sort descending instead of ascending."
    )

    out_group = check_parser.add_argument_group("output arguments")
    out_group.add_argument(
        "--csv",
        dest="csv_output",
        metavar="FILEPATH",
        help="Path to write the CSV file (default from config: osmosis_results.csv).",
    )
    out_group.add_argument(
        "--no-csv", action="store_true", help="Do not write a CSV file."
    )
    out_group.add_argument(
        "--json", dest="json_output", metavar="FILEPATH", help="Also write JSON."
    )
    out_group.add_argument(
        "--urls-out",
        metavar="FILEPATH",
        help="Write the filtered URLs, one per line.",
    )
    out_group.add_argument(
        "--open",
        dest="open_urls",
        action="store_true",
        help="Open every filtered URL in the browser (asks first).",
    )
    out_group.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask before --open."
    )

    # --- cache ---
    cache_parser = subparsers.add_parser(
        "cache", help="Manage the on-disk page cache."
    )
    cache_parser.add_argument(
        "--dir",
        dest="cache_dir",
        metavar="PATH",
        default=None,
        help="Cache directory to operate on (defaults to library default).",
    )
    cache_parser.add_argument(
        "--os-default",
        dest="cache_os_default",
        action="store_true",
        help="Use the OS-specific default cache directory.",
    )
    cache_sub = cache_parser.add_subparsers(dest="cache_cmd", required=True)
    cache_sub.add_parser("clear", help="Wipe the entire cache directory.")
    cache_sub.add_parser("stats", help="Show total items and size on disk.")
    cache_inspect = cache_sub.add_parser(
        "inspect", help="Dump the cached page for a specific URL."
    )
    cache_inspect.add_argument("url", help="The exact URL key to inspect in cache.")
    return parser


def _run_cache_command(args: argparse.Namespace, stdout: IO[str]) -> int:
    fc = _init_file_cache(args.cache_dir, args.cache_os_default)
    try:
        if args.cache_cmd == "clear":
            fc.clear_all()
            print(f"Cache cleared at: {fc.directory or '(disabled)'}", file=stdout)
            return 0

        if args.cache_cmd == "stats":
            st = fc.stats()
            bytes_on_disk = int(st.get("bytes", 0))
            out = {
                "directory": st.get("directory", ""),
                "items": int(st.get("items", 0)),
                "bytes": bytes_on_disk,
                "human_bytes": _human_bytes(bytes_on_disk),
            }
            print(json.dumps(out, indent=2), file=stdout)
            return 0

        # inspect
        data = fc.get(args.url)
        if data is None:
            print("Cache miss", file=stdout)
            return 2
        print(json.dumps(data, indent=2), file=stdout)
        return 0
    finally:
        fc.close()


def main(
    argv: Sequence[str] | None = None,
    stdout: IO[str] | None = None,
    stdin: IO[str] | None = None,
) -> int:
    """Entry point for the command-line interface."""
    stdout = stdout or sys.stdout
    stdin = stdin or sys.stdin

    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "cache":
        return _run_cache_command(args, stdout)

    # ---- check --------------------------------------------------------------
    try:
        urls = _load_urls(args.urls_file, stdin)
    except FileNotFoundError:
        return 1
    if not urls:
        print("No URLs to check.", file=stdout)
        return 1

    settings = build_settings(
        relays=args.relays, timeout=args.timeout, use_cache=args.use_cache
    )

    def on_progress(progress: Progress) -> None:
        if progress.running:
            render_progress(progress, urls[progress.current - 1], file=stdout)

    render_check_header(len(urls), file=stdout)
    records = check_urls(urls, settings=settings, on_progress=on_progress)

    selected = query(
        records,
        StatusFilter(args.status),
        args.search,
        SortKey(args.sort) if args.sort else None,
        SortDirection.DESC if args.desc else SortDirection.ASC,
    )
    render_results_section(selected, file=stdout)
    render_summary_line(summarize(records), file=stdout)

    if selected and not args.no_csv:
        out_path = write_csv(selected, args.csv_output or settings.output_file)
        print(f"CSV written to {out_path}", file=stdout)

    if args.json_output:
        json_path = Path(args.json_output)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        with json_path.open("w", encoding="utf-8") as f:
            json.dump([record_to_dict(r) for r in selected], f, indent=2)
        print(f"JSON written to {args.json_output}", file=stdout)

    if args.urls_out:
        Path(args.urls_out).write_text(urls_as_text(selected), encoding="utf-8")
        print(f"URLs written to {args.urls_out}", file=stdout)

    if args.open_urls:
        confirm = (lambda _msg: True) if args.yes else _ask_yes_no(stdin, stdout)
        opened = open_all(selected, confirm)
        print(f"Opened {opened} URL(s).", file=stdout)

    return 0


if __name__ == "__main__":
    sys.exit(main())
