"""Timestamp helpers. Readings are stamped in local time at second resolution."""

from __future__ import annotations

import datetime

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def now() -> str:
    """Return the current local time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.datetime.now().strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime.datetime:
    """Parse a stored timestamp string; raises ValueError on a malformed one."""
    return datetime.datetime.strptime(text.strip(), TIMESTAMP_FORMAT)
