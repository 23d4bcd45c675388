"""
Analytics query builders.

ClickFilterBuilder assembles the owner-scoped ``$match`` stage; the
aggregation strategies turn it into one pipeline per analytics view.
"""

from .aggregations import (
    AggregationStrategy,
    ClickLogAggregationStrategy,
    DeviceAggregationStrategy,
    GeoAggregationStrategy,
    LocationIndexAggregationStrategy,
    ReferrerAggregationStrategy,
    TimelineAggregationStrategy,
    WidgetStatsAggregationStrategy,
    format_location_label,
)
from .click_filter import ClickFilterBuilder

__all__ = [
    "AggregationStrategy",
    "ClickFilterBuilder",
    "ClickLogAggregationStrategy",
    "DeviceAggregationStrategy",
    "GeoAggregationStrategy",
    "LocationIndexAggregationStrategy",
    "ReferrerAggregationStrategy",
    "TimelineAggregationStrategy",
    "WidgetStatsAggregationStrategy",
    "format_location_label",
]
