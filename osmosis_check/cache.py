# osmosis_check/cache.py
"""
File-backed page cache.

- Storage: diskcache.Cache (robust, fast, cross-platform).
- Location: default is a visible folder in CWD; optionally an OS-specific app cache dir via platformdirs.
- Scope: only bodies of pages a relay returned successfully. Failures are never cached,
  so a later run always retries them.
"""
from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any, Optional

import diskcache
from platformdirs import user_cache_dir

log = logging.getLogger(__name__)


@dataclasses.dataclass
class CacheConfig:
    enabled: bool = False
    # Either a concrete directory path, or special marker "os-default"
    # for an OS-specific global cache location.
    directory: str = ".osmosis_check_cache"
    expire_seconds: int = 24 * 3600  # 1 day


class FileCache:
    """
    Thin wrapper over diskcache with a tiny, explicit key/value contract.
    Keys: target URL strings, exactly as given by the user.
    Values: dict with: status, text, relay.
    """

    def __init__(self, cfg: CacheConfig, app_name: str = "osmosis_check"):
        self.cfg = cfg
        self.app_name = app_name
        self._cache: diskcache.Cache | None = None

        if not cfg.enabled:
            log.info("Caching not enabled")
            return

        directory = cfg.directory
        if directory == "os-default":
            directory = user_cache_dir(self.app_name, appauthor=False)

        log.info("Cache at %s", directory)
        self._cache = diskcache.Cache(directory)

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()

    # ---- Introspection helpers ---------------------------------------------

    @property
    def directory(self) -> Optional[str]:
        """Returns the absolute cache directory path if available."""
        if self._cache is None or not self._cache.directory:
            return None
        return str(self._cache.directory)

    def _dir_size_bytes(self) -> int:
        d = self.directory
        if not d:
            return 0
        total = 0
        path = Path(d)
        if not path.exists():
            return 0
        for p in path.rglob("*"):
            # skip broken links just in case
            try:
                if p.is_file():
                    total += p.stat().st_size
            except OSError:
                continue
        return total

    def stats(self) -> dict[str, int | str]:
        """
        Returns a simple stats dict:
            - items: number of cached pages
            - bytes: on-disk size in bytes (recursive directory walk)
            - directory: absolute directory path
        """
        if self._cache is None:
            return {"items": 0, "bytes": 0, "directory": ""}
        return {
            "items": len(self._cache),
            "bytes": self._dir_size_bytes(),
            "directory": os.path.abspath(self.directory or ""),
        }

    def clear_all(self) -> None:
        """Clears all cache contents."""
        if self._cache is None:
            log.warning("Cache disabled")
            return
        self._cache.clear()

    # ---- Public API ---------------------------------------------------------

    def get(self, url: str) -> Optional[dict[str, Any]]:
        if self._cache is None:
            return None
        return self._cache.get(url)  # respects internal expirations

    def set_page(self, url: str, *, status: int, text: str, relay: str) -> None:
        if self._cache is None:
            return
        if not 200 <= status < 300:
            log.debug("Not caching non-success status %d for %s", status, url)
            return
        self._cache.set(
            url,
            {"status": status, "text": text, "relay": relay},
            expire=self.cfg.expire_seconds,
        )
