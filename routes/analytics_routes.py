"""
Owner-scoped analytics endpoints.

All routes require a bearer token and only ever read the caller's own
clicks. Each returns a JSON list, empty when nothing matches.

GET /api/analytics             — per-widget totals and unique visitors
GET /api/analytics/timeline    — click counts per hour or day
GET /api/analytics/referrers   — top referrer domains
GET /api/analytics/devices     — clicks per device class
GET /api/analytics/geo         — top locations
GET /api/analytics/logs        — recent activity feed
GET /api/analytics/locations   — countries and regions seen, for filter pickers
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from dependencies import get_analytics_service, get_current_owner
from schemas.dto.requests.analytics import AnalyticsQuery, TimelineQuery
from schemas.dto.responses.analytics import (
    ClickLogItem,
    DeviceStat,
    GeoStat,
    LocationItem,
    ReferrerStat,
    TimelinePoint,
    WidgetClickStat,
)
from schemas.dto.responses.common import ErrorResponse
from services.analytics_service import AnalyticsService

router = APIRouter(
    prefix="/api/analytics",
    tags=["analytics"],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("", response_model=list[WidgetClickStat])
async def widget_stats(
    query: AnalyticsQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[WidgetClickStat]:
    return await analytics.widget_stats(owner, query)


@router.get("/timeline", response_model=list[TimelinePoint])
async def timeline(
    query: TimelineQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[TimelinePoint]:
    return await analytics.timeline(owner, query)


@router.get("/referrers", response_model=list[ReferrerStat])
async def referrers(
    query: AnalyticsQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[ReferrerStat]:
    return await analytics.referrers(owner, query)


@router.get("/devices", response_model=list[DeviceStat])
async def devices(
    query: AnalyticsQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[DeviceStat]:
    return await analytics.devices(owner, query)


@router.get("/geo", response_model=list[GeoStat])
async def geo(
    query: AnalyticsQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[GeoStat]:
    return await analytics.geo(owner, query)


@router.get("/logs", response_model=list[ClickLogItem])
async def click_logs(
    query: AnalyticsQuery = Query(),
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[ClickLogItem]:
    return await analytics.click_logs(owner, query)


@router.get("/locations", response_model=list[LocationItem])
async def locations(
    owner: str = Depends(get_current_owner),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[LocationItem]:
    return await analytics.locations(owner)
