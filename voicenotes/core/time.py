"""
Timestamp helpers: ISO-8601 UTC stamps with millisecond precision ("...Z").
"""
from __future__ import annotations

import time
from datetime import datetime, timezone


def now_iso() -> str:
    """Current UTC time, e.g. `2024-05-01T09:30:00.123Z`."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms() -> int:
    return int(time.time() * 1000)


def parse_iso(value: object) -> datetime:
    """Parses an ISO-8601 stamp into an aware datetime.

    Accepts the trailing `Z` and naive values (read as UTC). Unparseable, empty
    or non-string values sort as the oldest possible instant.
    """
    if not value or not isinstance(value, str):
        return datetime.min.replace(tzinfo=timezone.utc)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
