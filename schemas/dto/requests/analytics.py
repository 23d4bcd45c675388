"""
Request DTOs for the owner-scoped analytics endpoints.

AnalyticsQuery — GET /api/analytics[/referrers|/devices|/geo|/logs]
TimelineQuery  — GET /api/analytics/timeline (adds ``mode`` and ``days``)

Bounds are parsed leniently: a malformed or ``"null"`` ``start``/``end`` is
dropped rather than rejected, and ``"null"`` location filters are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.datetime_utils import parse_datetime

_NULL_FILTER_VALUES = frozenset({"", "null", "undefined"})


def _clean_filter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return None if value.lower() in _NULL_FILTER_VALUES else value


class AnalyticsQuery(BaseModel):
    """Shared query parameters for every analytics view."""

    model_config = ConfigDict(populate_by_name=True)

    # Time range as ISO 8601 strings
    start: Optional[str] = None
    end: Optional[str] = None

    # Exact-match location filters
    country: Optional[str] = None
    region: Optional[str] = None

    # --- Parsed results (excluded from serialization) ---
    start_date: Optional[datetime] = Field(default=None, exclude=True)
    end_date: Optional[datetime] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _parse_bounds_and_filters(self) -> "AnalyticsQuery":
        self.start_date = parse_datetime(self.start)
        self.end_date = parse_datetime(self.end)
        self.country = _clean_filter(self.country)
        self.region = _clean_filter(self.region)
        return self

    def log_context(self) -> dict[str, Any]:
        """Effective filter values, for log context."""
        return {
            "start": self.start_date.isoformat() if self.start_date else None,
            "end": self.end_date.isoformat() if self.end_date else None,
            "country": self.country,
            "region": self.region,
        }


class TimelineQuery(AnalyticsQuery):
    """Timeline parameters: ``mode=hourly`` or ``days=7|30``."""

    mode: Optional[str] = None
    days: Optional[str] = None
