# osmosis_check/actions.py
# Bulk "open every URL" pass-through. Opens nothing unless the user confirms.

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Iterable

from osmosis_check.models import CheckRecord

log = logging.getLogger(__name__)


def confirmation_prompt(count: int) -> str:
    return f"Open {count} URL(s) in the browser?"


def open_all(
    records: Iterable[CheckRecord],
    confirm: Callable[[str], bool],
    opener: Callable[[str], object] = webbrowser.open_new_tab,
) -> int:
    """
    Ask `confirm` with a message naming the count, then open each URL.

    Returns the number of URLs opened (0 when declined or empty).
    """
    urls = [r.url for r in records]
    if not urls:
        return 0
    if not confirm(confirmation_prompt(len(urls))):
        log.info("Bulk open declined for %d URL(s).", len(urls))
        return 0
    for url in urls:
        opener(url)
    return len(urls)
