# osmosis_check/relay.py
"""
HTTPX-based relay fetcher.

Responsibilities:
- Wrap a target URL in each configured relay (CORS proxy) template.
- Try relays strictly in order, one request in flight at a time. Each attempt
  has a total deadline of `timeout` seconds covering headers and body; a relay
  that trickles bytes past the deadline is cut off and counted as a timeout.
- Return the first 2xx response; record every other outcome as the
  "last error" and move on. No backoff, a single pass over the list.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence
from urllib.parse import quote

import httpx

from osmosis_check.cache import FileCache

log = logging.getLogger(__name__)


class RelayError(Exception):
    """Base class for relay failures."""

    def __init__(self, relay: str, message: str):
        super().__init__(message)
        self.relay = relay


class RelayTimeout(RelayError):
    """One relay attempt ran past its timeout and was cancelled."""


class RelayHttpError(RelayError):
    """A relay answered with a non-success status."""

    def __init__(self, relay: str, status_code: int):
        super().__init__(relay, f"HTTP error: {status_code}")
        self.status_code = status_code


class RelayNetworkError(RelayError):
    """A relay could not be reached or dropped the connection."""


class AllRelaysExhausted(Exception):
    """Every relay failed for one target URL."""

    def __init__(self, url: str, last_error: RelayError | None, attempts: int):
        detail = str(last_error) if last_error else "no relay configured"
        super().__init__(f"All relays failed for {url}: {detail}")
        self.url = url
        self.last_error = last_error
        self.attempts = attempts


@dataclass(frozen=True)
class RelayEndpoint:
    """
    A relay URL template. `{url}` inserts the target as-is (path-suffix relays),
    `{url_encoded}` inserts it percent-encoded (query-parameter relays).
    """

    template: str

    def wrap(self, url: str) -> str:
        return self.template.format(url=url, url_encoded=quote(url, safe=""))

    @property
    def name(self) -> str:
        return httpx.URL(self.template.split("{", 1)[0]).host or self.template


@dataclass(frozen=True)
class FetchResponse:
    status_code: int
    text: str
    relay: str
    from_cache: bool = False


def make_endpoints(templates: Iterable[str]) -> List[RelayEndpoint]:
    return [RelayEndpoint(t) for t in templates]


class RelayFetcher:
    """
    Fetch page HTML through an ordered list of relays.

    Usage::

        with RelayFetcher(make_endpoints(DEFAULT_RELAYS), timeout=20.0) as fetcher:
            response = fetcher.fetch("https://www.osmosis.org/learn/Ebola_virus")

    An injected `client` stays open on `close()` and belongs to the caller.
    A `cache` is handed over: the fetcher closes it on `close()`.
    """

    def __init__(
        self,
        relays: Sequence[RelayEndpoint],
        timeout: float,
        *,
        user_agent: str | None = None,
        client: httpx.Client | None = None,
        cache: FileCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not relays:
            raise ValueError("At least one relay endpoint is required")
        if len(relays) < 2:
            log.warning("Only one relay configured; there is no fallback if it fails.")
        self.relays = tuple(relays)
        self.timeout = timeout
        self._clock = clock
        self._cache = cache
        self._owns_client = client is None
        if client is None:
            headers = {"User-Agent": user_agent} if user_agent else {}
            client = httpx.Client(follow_redirects=True, headers=headers)
        self._client = client

    def __enter__(self) -> "RelayFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
        if self._cache is not None:
            self._cache.close()

    def _attempt(self, relay: RelayEndpoint, url: str) -> FetchResponse:
        proxied = relay.wrap(url)
        deadline = self._clock() + self.timeout
        timed_out = RelayTimeout(relay.name, f"Timed out after {self.timeout}s")
        try:
            # Leaving the stream block closes the connection, which cancels the request.
            with self._client.stream("GET", proxied, timeout=self.timeout) as resp:
                if not resp.is_success:
                    raise RelayHttpError(relay.name, resp.status_code)
                chunks = []
                for chunk in resp.iter_bytes():
                    if self._clock() > deadline:
                        raise timed_out
                    chunks.append(chunk)
                if self._clock() > deadline:
                    raise timed_out
                body = b"".join(chunks)
                text = body.decode(resp.encoding or "utf-8", errors="replace")
                status_code = resp.status_code
        except httpx.TimeoutException as e:
            raise timed_out from e
        except httpx.RequestError as e:
            raise RelayNetworkError(relay.name, f"Network error: {e}") from e

        return FetchResponse(status_code=status_code, text=text, relay=relay.name)

    def fetch(self, url: str) -> FetchResponse:
        """
        Return the first successful relay response for `url`.

        Raises:
            AllRelaysExhausted: when no relay produced a 2xx response. The last
                relay's error is available as `last_error`.
        """
        if self._cache is not None:
            hit = self._cache.get(url)
            if hit and hit.get("text"):
                log.info("Cache hit for %s", url)
                return FetchResponse(
                    status_code=int(hit.get("status", 200)),
                    text=hit["text"],
                    relay=str(hit.get("relay", "")),
                    from_cache=True,
                )

        last_error: RelayError | None = None
        attempts = 0
        for relay in self.relays:
            attempts += 1
            try:
                response = self._attempt(relay, url)
            except RelayError as e:
                log.warning("Relay %s failed for %s: %s", relay.name, url, e)
                last_error = e
                continue

            log.info("Fetched %s via %s (%d)", url, relay.name, response.status_code)
            if self._cache is not None:
                self._cache.set_page(
                    url, status=response.status_code, text=response.text, relay=relay.name
                )
            return response

        raise AllRelaysExhausted(url, last_error, attempts)
