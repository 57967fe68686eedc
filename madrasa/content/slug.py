"""URL slugs for news items: ``<title, max 50 chars>-<base36 ms timestamp>``."""
from __future__ import annotations

import re
import time

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def make_slug(title: str, timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    base = _NON_SLUG.sub("-", title.lower()).strip("-")[:50]
    return f"{base}-{to_base36(timestamp_ms)}"
