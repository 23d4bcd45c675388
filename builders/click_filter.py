from datetime import datetime
from typing import Any, Dict, Optional

from schemas.dto.requests.analytics import AnalyticsQuery

# Matches documents whose geo enrichment has landed.
HAS_COUNTRY = {"$type": "string", "$ne": ""}


class ClickFilterBuilder:
    """Builder pattern for constructing the $match stage of analytics pipelines"""

    def __init__(self, owner_username: str):
        self.owner_username = owner_username
        self.time_filters: Dict[str, datetime] = {}
        self.location_filters: Dict[str, Any] = {}

    def with_time_range(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> "ClickFilterBuilder":
        """Add a closed or half-open clicked_at range; missing bounds are skipped"""
        if start_date:
            self.time_filters["$gte"] = start_date
        if end_date:
            self.time_filters["$lte"] = end_date
        return self

    def with_since(self, since: datetime) -> "ClickFilterBuilder":
        """Replace any clicked_at range with an open-ended lower bound"""
        self.time_filters = {"$gte": since}
        return self

    def with_location(
        self, country: Optional[str] = None, region: Optional[str] = None
    ) -> "ClickFilterBuilder":
        """Add exact-match country/region filters"""
        if country:
            self.location_filters["country"] = country
        if region:
            self.location_filters["region"] = region
        return self

    def require_country(self) -> "ClickFilterBuilder":
        """Restrict to enriched events unless an explicit country is already set"""
        self.location_filters.setdefault("country", dict(HAS_COUNTRY))
        return self

    def build(self) -> Dict[str, Any]:
        """Build the final MongoDB query"""
        query: Dict[str, Any] = {"owner_username": self.owner_username}
        if self.time_filters:
            query["clicked_at"] = dict(self.time_filters)
        query.update(self.location_filters)
        return query

    @classmethod
    def from_query(
        cls, owner_username: str, query: AnalyticsQuery
    ) -> "ClickFilterBuilder":
        """Owner scope plus every optional refinement carried by *query*"""
        return (
            cls(owner_username)
            .with_time_range(query.start_date, query.end_date)
            .with_location(query.country, query.region)
        )
