"""
AnalyticsService — owner-scoped aggregations over click events.

Every view starts from the same filter (owner, optional time range, optional
country/region), runs one aggregation strategy and returns typed rows. Views
are read-only and independent of each other.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from builders.aggregations import (
    AggregationStrategy,
    ClickLogAggregationStrategy,
    DeviceAggregationStrategy,
    GeoAggregationStrategy,
    LocationIndexAggregationStrategy,
    ReferrerAggregationStrategy,
    TimelineAggregationStrategy,
    WidgetStatsAggregationStrategy,
)
from builders.click_filter import ClickFilterBuilder
from repositories.click_repository import ClickRepository
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
from shared.datetime_utils import utcnow
from shared.logging import get_logger, should_sample
from shared.time_bucket_utils import select_timeline_window

log = get_logger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


class AnalyticsService:
    def __init__(self, repository: ClickRepository) -> None:
        self._repository = repository

    async def _run(
        self,
        strategy: AggregationStrategy,
        match: dict[str, Any],
        row_model: type[RowT],
        owner_username: str,
        query: Optional[AnalyticsQuery] = None,
    ) -> list[RowT]:
        started = time.perf_counter()
        raw = await self._repository.aggregate(
            strategy.build_pipeline(match), view=strategy.dimension_name
        )
        rows = [row_model.model_validate(row) for row in strategy.format_results(raw)]
        if should_sample("analytics_query"):
            log.info(
                "analytics_query",
                view=strategy.dimension_name,
                owner_username=owner_username,
                rows=len(rows),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **(query.log_context() if query is not None else {}),
            )
        return rows

    async def widget_stats(
        self, owner_username: str, query: AnalyticsQuery
    ) -> list[WidgetClickStat]:
        match = ClickFilterBuilder.from_query(owner_username, query).build()
        return await self._run(
            WidgetStatsAggregationStrategy(),
            match,
            WidgetClickStat,
            owner_username,
            query,
        )

    async def timeline(
        self,
        owner_username: str,
        query: TimelineQuery,
        now: Optional[datetime] = None,
    ) -> list[TimelinePoint]:
        window = select_timeline_window(
            query.start_date, query.end_date, query.mode, query.days, now or utcnow()
        )
        builder = ClickFilterBuilder.from_query(owner_username, query)
        if window.since is not None:
            builder.with_since(window.since)
        return await self._run(
            TimelineAggregationStrategy(window.bucket_config),
            builder.build(),
            TimelinePoint,
            owner_username,
            query,
        )

    async def referrers(
        self, owner_username: str, query: AnalyticsQuery
    ) -> list[ReferrerStat]:
        match = ClickFilterBuilder.from_query(owner_username, query).build()
        return await self._run(
            ReferrerAggregationStrategy(), match, ReferrerStat, owner_username, query
        )

    async def devices(
        self, owner_username: str, query: AnalyticsQuery
    ) -> list[DeviceStat]:
        match = ClickFilterBuilder.from_query(owner_username, query).build()
        return await self._run(
            DeviceAggregationStrategy(), match, DeviceStat, owner_username, query
        )

    async def geo(self, owner_username: str, query: AnalyticsQuery) -> list[GeoStat]:
        match = (
            ClickFilterBuilder.from_query(owner_username, query)
            .require_country()
            .build()
        )
        return await self._run(
            GeoAggregationStrategy(), match, GeoStat, owner_username, query
        )

    async def click_logs(
        self, owner_username: str, query: AnalyticsQuery
    ) -> list[ClickLogItem]:
        match = ClickFilterBuilder.from_query(owner_username, query).build()
        return await self._run(
            ClickLogAggregationStrategy(), match, ClickLogItem, owner_username, query
        )

    async def locations(self, owner_username: str) -> list[LocationItem]:
        # Only owner scope: the index feeds the location filter pickers
        match = ClickFilterBuilder(owner_username).require_country().build()
        return await self._run(
            LocationIndexAggregationStrategy(), match, LocationItem, owner_username
        )
