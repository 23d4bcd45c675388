"""
Response DTOs for the analytics endpoints.

Every endpoint returns a JSON list of one of these shapes — an empty list,
never null, when nothing matches.

WidgetClickStat — GET /api/analytics
TimelinePoint   — GET /api/analytics/timeline
ReferrerStat    — GET /api/analytics/referrers
DeviceStat      — GET /api/analytics/devices
GeoStat         — GET /api/analytics/geo
ClickLogItem    — GET /api/analytics/logs
LocationItem    — GET /api/analytics/locations
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class WidgetClickStat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    widget_id: str
    url: str = ""
    custom_title: str = ""
    custom_image: str = ""
    total: int
    unique: int


class TimelinePoint(BaseModel):
    """One bucket: ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:00``."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    total: int


class ReferrerStat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: str
    count: int


class DeviceStat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_type: str
    count: int


class GeoStat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str
    country_code: str = ""
    count: int


class ClickLogItem(BaseModel):
    """One collapsed row of the recent-activity feed."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str = ""
    device_type: str = ""
    referrer_domain: str = ""
    country_code: str = ""
    location: str
    clicked_at: datetime
    count: int


class LocationItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    country: str
    regions: list[str]
