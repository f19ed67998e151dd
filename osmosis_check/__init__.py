# Entrypoint for the osmosis_check package.
# This file makes the public API available to programmers.

from __future__ import annotations

from osmosis_check.api import check_urls
from osmosis_check.classifier import classify
from osmosis_check.export import export_csv
from osmosis_check.models import (
    CheckFailure,
    CheckRecord,
    CheckSuccess,
    DetectionMethod,
    DetectionResult,
    ErrorKind,
)
from osmosis_check.query import SortDirection, SortKey, StatusFilter, query
from osmosis_check.__about__ import __version__

# The __all__ variable defines the public API of the package.
# When a user writes `from osmosis_check import *`, only these names will be imported.
__all__ = [
    "check_urls",
    "classify",
    "export_csv",
    "query",
    "CheckFailure",
    "CheckRecord",
    "CheckSuccess",
    "DetectionMethod",
    "DetectionResult",
    "ErrorKind",
    "SortDirection",
    "SortKey",
    "StatusFilter",
    "__version__",
]
