# osmosis_check/config.py
"""
Centralized configuration management.

Handles loading defaults, merging in settings from pyproject.toml,
and applying runtime overrides. The merged dict is frozen into a
`Settings` object that is passed explicitly to the fetcher and runner.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, MutableMapping

try:
    import tomli
except ImportError:
    tomli = None  # type: ignore

from osmosis_check.cache import CacheConfig

log = logging.getLogger(__name__)

# Relay templates. `{url}` is the raw target appended as a path suffix,
# `{url_encoded}` is the percent-encoded target for query-string relays.
DEFAULT_RELAYS = [
    "https://cors.sh/{url}",
    "https://corsproxy.io/?{url_encoded}",
]

DEFAULT_OUTPUT_FILE = "osmosis_results.csv"

# This is the baseline configuration dictionary.
DEFAULT_CONFIG: dict[str, Any] = {
    "relays": DEFAULT_RELAYS,
    "timeout": 20.0,  # seconds, per relay attempt
    "user_agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36"
    ),
    # strftime format; %c is the locale's date and time representation
    "timestamp_format": "%c",
    "output_file": DEFAULT_OUTPUT_FILE,
    "cache": {
        "enabled": False,
        "directory": ".osmosis_check_cache",
        "expire_seconds": 24 * 3600,  # 1 day
    },
}


@dataclass(frozen=True)
class Settings:
    """Immutable view of the merged configuration."""

    relays: tuple[str, ...]
    timeout: float
    user_agent: str
    timestamp_format: str
    output_file: str
    cache: CacheConfig

    @classmethod
    def from_config(cls, config: MutableMapping[str, Any]) -> "Settings":
        cache_raw = config.get("cache", {})
        return cls(
            relays=tuple(config["relays"]),
            timeout=float(config["timeout"]),
            user_agent=str(config["user_agent"]),
            timestamp_format=str(config["timestamp_format"]),
            output_file=str(config["output_file"]),
            cache=CacheConfig(
                enabled=bool(cache_raw.get("enabled", False)),
                directory=str(cache_raw.get("directory", ".osmosis_check_cache")),
                expire_seconds=int(cache_raw.get("expire_seconds", 24 * 3600)),
            ),
        )


def _deep_merge_dict(
    base: MutableMapping[str, Any], overrides: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Recursively merge dicts."""
    for key, value in overrides.items():
        if isinstance(value, MutableMapping) and isinstance(
            base.get(key), MutableMapping
        ):
            base[key] = _deep_merge_dict(base[key], value)
        else:
            base[key] = value
    return base


def load_config(pyproject_path: Path | None = None) -> dict[str, Any]:
    """
    Loads configuration from defaults and merges settings from pyproject.toml.

    1. Starts with DEFAULT_CONFIG.
    2. If `tomli` is installed, it looks for `pyproject.toml`.
    3. If `pyproject.toml` is found, it merges settings from
       `[tool.osmosis_check]` over the defaults.
    """
    # Start with a deep copy of the defaults
    config = DEFAULT_CONFIG.copy()
    config["cache"] = DEFAULT_CONFIG["cache"].copy()
    config["relays"] = DEFAULT_CONFIG["relays"].copy()

    if tomli is None:
        log.debug("tomli not installed. Skipping pyproject.toml configuration.")
        return config

    if pyproject_path is None:
        pyproject_path = Path.cwd() / "pyproject.toml"

    if not pyproject_path.exists():
        log.debug(
            "No pyproject.toml found at %s. Using default config.", pyproject_path
        )
        return config

    try:
        with pyproject_path.open("rb") as f:
            toml_data = tomli.load(f)

        project_config = toml_data.get("tool", {}).get("osmosis_check", {})
        if project_config:
            log.info("Loading config from %s", pyproject_path)
            config = _deep_merge_dict(config, project_config)  # type: ignore
        else:
            log.debug("No [tool.osmosis_check] section in %s.", pyproject_path)

    except Exception as e:
        log.warning(
            "Failed to load or parse %s: %s. Using default config.",
            pyproject_path,
            e,
            exc_info=True,
        )

    return config
