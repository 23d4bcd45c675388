"""
Date/time parsing utilities — framework-agnostic.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

# Front-ends serialise an unset date picker as the literal string "null".
_NULL_MARKERS = frozenset({"", "null", "undefined"})


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 value into a timezone-aware UTC datetime.

    Accepts:
    - ``None``, ``""`` and ``"null"`` → ``None``
    - ``datetime`` instances (naive ones are assumed UTC)
    - ISO 8601 strings; a trailing ``"Z"`` is accepted

    Returns:
        A timezone-aware ``datetime`` in UTC, or ``None`` if *value* is empty
        or cannot be parsed. Malformed input never raises.
    """
    if value is None:
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        else:
            raw = str(value).strip()
            if raw.lower() in _NULL_MARKERS:
                return None
            if raw.endswith(("Z", "z")):
                raw = raw[:-1] + "+00:00"
            dt = datetime.fromisoformat(raw)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (patched in tests)."""
    return datetime.now(timezone.utc)
