"""
Aggregation strategies for the analytics views.

Each strategy turns an owner-scoped ``$match`` query into a pipeline and
shapes the raw documents MongoDB returns. Ties in ranked views are broken
by the group key ascending so results are deterministic.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from shared.datetime_utils import parse_datetime
from shared.time_bucket_utils import (
    TimeBucketConfig,
    create_mongo_time_bucket_expression,
)

TOP_REFERRERS_LIMIT = 20
TOP_LOCATIONS_LIMIT = 30
CLICK_LOG_LIMIT = 200

UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN = "Unknown"

DAY_FORMAT = "%Y-%m-%d"


def format_location_label(
    city: Optional[str],
    region: Optional[str],
    country: Optional[str],
    default: str = UNKNOWN_LOCATION,
) -> str:
    """
    Human-readable label for a geo group.

    Precedence: "City, Region" → "City, Country" → "Region, Country" →
    "Country" → *default*.
    """
    if city and region:
        return f"{city}, {region}"
    if city and country:
        return f"{city}, {country}"
    if region and country:
        return f"{region}, {country}"
    if country:
        return country
    return default


class AggregationStrategy(ABC):
    """Abstract base class for aggregation strategies"""

    @abstractmethod
    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Build aggregation pipeline for this strategy"""
        pass

    @abstractmethod
    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Format the aggregation results"""
        pass

    @property
    @abstractmethod
    def dimension_name(self) -> str:
        """Get the dimension name for this strategy"""
        pass


class WidgetStatsAggregationStrategy(AggregationStrategy):
    """Per-widget totals and unique visitors"""

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    "_id": "$widget_id",
                    "url": {"$first": "$url"},
                    "custom_title": {"$first": "$custom_title"},
                    "custom_image": {"$first": "$custom_image"},
                    "total": {"$sum": 1},
                    "unique_ips": {"$addToSet": "$ip_hash"},
                }
            },
            {"$addFields": {"unique": {"$size": "$unique_ips"}}},
            {"$project": {"unique_ips": 0}},
            {"$sort": {"total": -1, "_id": 1}},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {
                "widget_id": result["_id"],
                "url": result.get("url") or "",
                "custom_title": result.get("custom_title") or "",
                "custom_image": result.get("custom_image") or "",
                "total": result.get("total", 0),
                "unique": result.get("unique", 0),
            }
            for result in results
        ]

    @property
    def dimension_name(self) -> str:
        return "widget"


class TimelineAggregationStrategy(AggregationStrategy):
    """Click counts per hourly or daily bucket, chronological"""

    def __init__(self, bucket_config: TimeBucketConfig):
        self.bucket_config = bucket_config

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    "_id": create_mongo_time_bucket_expression(self.bucket_config),
                    "total": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # Empty buckets are not filled
        return [
            {"date": result["_id"], "total": result.get("total", 0)}
            for result in results
        ]

    @property
    def dimension_name(self) -> str:
        return "time"


class ReferrerAggregationStrategy(AggregationStrategy):
    """Top referrer domains"""

    def __init__(self, limit: int = TOP_REFERRERS_LIMIT):
        self.limit = limit

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {"$group": {"_id": "$referrer_domain", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": self.limit},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {"domain": result["_id"] or "", "count": result.get("count", 0)}
            for result in results
        ]

    @property
    def dimension_name(self) -> str:
        return "referrer"


class DeviceAggregationStrategy(AggregationStrategy):
    """Click counts per device class"""

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {"$group": {"_id": "$device_type", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {"device_type": result["_id"] or "", "count": result.get("count", 0)}
            for result in results
        ]

    @property
    def dimension_name(self) -> str:
        return "device"


class GeoAggregationStrategy(AggregationStrategy):
    """Top (country, region, city) groups among enriched clicks"""

    def __init__(self, limit: int = TOP_LOCATIONS_LIMIT):
        self.limit = limit

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    "_id": {
                        "country": "$country",
                        "region": "$region",
                        "city": "$city",
                    },
                    "country_code": {"$first": "$country_code"},
                    "count": {"$sum": 1},
                }
            },
            {
                "$sort": {
                    "count": -1,
                    "_id.country": 1,
                    "_id.region": 1,
                    "_id.city": 1,
                }
            },
            {"$limit": self.limit},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        formatted = []
        for result in results:
            key = result.get("_id") or {}
            formatted.append(
                {
                    "location": format_location_label(
                        key.get("city"), key.get("region"), key.get("country")
                    ),
                    "country_code": result.get("country_code") or "",
                    "count": result.get("count", 0),
                }
            )
        return formatted

    @property
    def dimension_name(self) -> str:
        return "geo"


class ClickLogAggregationStrategy(AggregationStrategy):
    """
    Recent-activity feed.

    Clicks sharing url, device, referrer, location and UTC calendar day are
    collapsed into one row carrying the latest timestamp and a count.
    """

    def __init__(self, limit: int = CLICK_LOG_LIMIT):
        self.limit = limit

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {
                "$group": {
                    "_id": {
                        "url": "$url",
                        "device_type": "$device_type",
                        "referrer_domain": "$referrer_domain",
                        "country": "$country",
                        "country_code": "$country_code",
                        "region": "$region",
                        "city": "$city",
                        "day": {
                            "$dateToString": {"format": DAY_FORMAT, "date": "$clicked_at"}
                        },
                    },
                    "clicked_at": {"$max": "$clicked_at"},
                    "count": {"$sum": 1},
                }
            },
            {"$sort": {"clicked_at": -1, "_id.url": 1}},
            {"$limit": self.limit},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        formatted = []
        for i, result in enumerate(results):
            key = result.get("_id") or {}
            formatted.append(
                {
                    "id": f"agg-{i}",
                    "url": key.get("url") or "",
                    "device_type": key.get("device_type") or "",
                    "referrer_domain": key.get("referrer_domain") or "",
                    "country_code": key.get("country_code") or "",
                    "location": format_location_label(
                        key.get("city"),
                        key.get("region"),
                        key.get("country"),
                        default=UNKNOWN,
                    ),
                    # naive BSON datetimes are UTC
                    "clicked_at": parse_datetime(result["clicked_at"]),
                    "count": result.get("count", 0),
                }
            )
        return formatted

    @property
    def dimension_name(self) -> str:
        return "log"


class LocationIndexAggregationStrategy(AggregationStrategy):
    """Distinct countries with their distinct non-empty regions"""

    def build_pipeline(self, base_query: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": base_query},
            {"$group": {"_id": {"country": "$country", "region": "$region"}}},
            {
                "$group": {
                    "_id": "$_id.country",
                    "regions": {"$addToSet": "$_id.region"},
                }
            },
            {"$sort": {"_id": 1}},
        ]

    def format_results(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {
                "country": result["_id"],
                "regions": sorted(
                    region for region in result.get("regions", []) if region
                ),
            }
            for result in results
        ]

    @property
    def dimension_name(self) -> str:
        return "location"
