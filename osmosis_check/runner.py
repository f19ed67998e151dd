# osmosis_check/runner.py
"""
Sequential batch runner.

Turns a list of URLs into an ordered stream of CheckRecords. URLs are
processed one at a time, never concurrently: the relays are shared third-party
infrastructure, and serial pacing keeps progress reporting exact.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Iterator, List, Protocol

from osmosis_check.classifier import classify
from osmosis_check.models import (
    CheckFailure,
    CheckRecord,
    CheckSuccess,
    DetectionResult,
    ErrorKind,
    Progress,
)
from osmosis_check.relay import (
    AllRelaysExhausted,
    FetchResponse,
    RelayHttpError,
    RelayNetworkError,
    RelayTimeout,
)

log = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Response took too long"
UNREACHABLE_MESSAGE = "Unable to reach the page through any relay"


class BatchInProgressError(RuntimeError):
    """A batch was started while another one on the same runner is still running."""


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchResponse: ...


def parse_url_lines(text: str) -> List[str]:
    """Split raw user input into URLs, one per non-blank line."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def describe_failure(error: BaseException) -> tuple[ErrorKind, str]:
    """Map a per-URL exception to a category and a human-readable message."""
    cause: BaseException | None = error
    if isinstance(error, AllRelaysExhausted):
        cause = error.last_error
        if cause is None:
            return ErrorKind.UNREACHABLE, UNREACHABLE_MESSAGE

    if isinstance(cause, RelayTimeout):
        return ErrorKind.TIMEOUT, TIMEOUT_MESSAGE
    if isinstance(cause, RelayNetworkError):
        return ErrorKind.UNREACHABLE, UNREACHABLE_MESSAGE
    if isinstance(cause, RelayHttpError):
        return ErrorKind.OTHER, str(cause)
    return ErrorKind.OTHER, str(error) or type(error).__name__


class ResultLog:
    """Append-only, ordered log of CheckRecords owned by the caller."""

    def __init__(self) -> None:
        self._records: List[CheckRecord] = []

    def append(self, record: CheckRecord) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records = []

    def snapshot(self) -> tuple[CheckRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CheckRecord]:
        return iter(self.snapshot())


class BatchRunner:
    """
    Drive fetch + classify over a URL list.

    `run()` returns a lazy generator; each `next()` checks exactly one URL,
    appends its record to `results` and yields it. Observers can read `progress`
    or pass `on_progress`, which is called before each fetch starts.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        classifier: Callable[[str], DetectionResult] = classify,
        results: ResultLog | None = None,
        clock: Callable[[], datetime] = datetime.now,
        timestamp_format: str = "%c",
        on_progress: Callable[[Progress], None] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.classifier = classifier
        self.results = results if results is not None else ResultLog()
        self.clock = clock
        self.timestamp_format = timestamp_format
        self.on_progress = on_progress
        self.progress = Progress()
        self.busy = False

    def _set_progress(self, progress: Progress) -> None:
        self.progress = progress
        if self.on_progress is not None:
            self.on_progress(progress)

    def _timestamp(self) -> str:
        return self.clock().strftime(self.timestamp_format)

    def check_one(self, url: str) -> CheckRecord:
        """Fetch and classify a single URL. Never raises for per-URL failures."""
        try:
            response = self.fetcher.fetch(url)
            detection = self.classifier(response.text)
        except Exception as e:
            kind, message = describe_failure(e)
            log.error("Failed to check URL %s: %s", url, e)
            return CheckFailure(
                url=url, timestamp=self._timestamp(), kind=kind, message=message
            )
        log.info("Checked %s: %s", url, detection.method_label)
        return CheckSuccess(url=url, timestamp=self._timestamp(), detection=detection)

    def run(self, urls: Iterable[str]) -> Iterator[CheckRecord]:
        targets = [u.strip() for u in urls if u and u.strip()]
        if not targets:
            log.info("No URLs to check.")
            return
        if self.busy:
            raise BatchInProgressError("A batch is already running")

        self.busy = True
        self.results.clear()
        total = len(targets)
        log.info("Checking %d URL(s).", total)
        try:
            for index, url in enumerate(targets, start=1):
                self._set_progress(Progress(index, total))
                record = self.check_one(url)
                self.results.append(record)
                yield record
        finally:
            self.busy = False
            self._set_progress(Progress())

    def run_all(self, urls: Iterable[str]) -> List[CheckRecord]:
        """Run a batch to completion and return its records in input order."""
        return list(self.run(urls))
