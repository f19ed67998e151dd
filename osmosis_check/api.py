# osmosis_check/api.py
# The primary, programmer-facing API for the library.

from __future__ import annotations

import logging
from typing import Callable, Iterable, List

from osmosis_check.cache import FileCache
from osmosis_check.config import Settings, load_config
from osmosis_check.models import CheckRecord, Progress
from osmosis_check.relay import RelayFetcher, make_endpoints
from osmosis_check.runner import BatchRunner, ResultLog

log = logging.getLogger(__name__)


def build_settings(
    *,
    relays: List[str] | None = None,
    timeout: float | None = None,
    use_cache: bool | None = None,
) -> Settings:
    """Load defaults + pyproject.toml and apply any runtime overrides."""
    config = load_config()
    log.debug("Loaded base configuration.")

    if relays:
        config["relays"] = list(relays)
        log.info("Applied override - relays set to: %s", relays)
    if timeout is not None:
        config["timeout"] = timeout
        log.info("Applied override - timeout set to: %s", timeout)
    if use_cache is not None:
        config["cache"]["enabled"] = use_cache
        log.info("Applied override - cache enabled: %s", use_cache)

    return Settings.from_config(config)


def make_fetcher(settings: Settings) -> RelayFetcher:
    cache = FileCache(settings.cache) if settings.cache.enabled else None
    return RelayFetcher(
        make_endpoints(settings.relays),
        settings.timeout,
        user_agent=settings.user_agent,
        cache=cache,
    )


def check_urls(
    urls: Iterable[str],
    *,
    settings: Settings | None = None,
    results: ResultLog | None = None,
    on_progress: Callable[[Progress], None] | None = None,
    on_record: Callable[[CheckRecord], None] | None = None,
) -> List[CheckRecord]:
    """
    Check every non-blank URL in order and return one record per URL.

    Args:
        urls: Target page URLs; blank entries are ignored.
        settings: Relay, timeout and cache settings. Loaded from defaults and
            pyproject.toml when omitted.
        results: Optional caller-owned log that receives records as they complete.
        on_progress: Called with (current, total) before each URL is fetched.
        on_record: Called with each record as soon as it is produced.

    Returns:
        The records, in the same order as the non-blank input URLs.
    """
    settings = settings or build_settings()
    records: List[CheckRecord] = []
    with make_fetcher(settings) as fetcher:
        runner = BatchRunner(
            fetcher,
            results=results,
            timestamp_format=settings.timestamp_format,
            on_progress=on_progress,
        )
        for record in runner.run(urls):
            records.append(record)
            if on_record is not None:
                on_record(record)

    log.info("Batch complete. %d record(s).", len(records))
    return records
