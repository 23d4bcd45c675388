"""
Time bucket selection for the analytics timeline.

Selection policy, evaluated in order:

1. Explicit ``start`` and ``end``: a span of at most 48 hours is bucketed
   hourly, anything longer daily. The caller's range is used as-is.
2. ``mode=hourly``: the last 24 hours, bucketed hourly.
3. Otherwise the last N days (30 when ``days=30`` is requested, else 7),
   bucketed daily.

Rules 2 and 3 add an implicit lower bound on ``clicked_at``.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional


class TimeBucketStrategy(Enum):
    """Enumeration of available time bucketing strategies"""

    HOURLY = "hourly"
    DAILY = "daily"


class TimeBucketConfig:
    """Configuration for time bucket aggregation"""

    def __init__(
        self,
        strategy: TimeBucketStrategy,
        mongo_format: str,
    ):
        self.strategy = strategy
        self.mongo_format = mongo_format

    def __repr__(self) -> str:
        return f"TimeBucketConfig({self.strategy.value!r}, {self.mongo_format!r})"


BUCKET_CONFIGS = {
    TimeBucketStrategy.HOURLY: TimeBucketConfig(
        strategy=TimeBucketStrategy.HOURLY,
        mongo_format="%Y-%m-%d %H:00",
    ),
    TimeBucketStrategy.DAILY: TimeBucketConfig(
        strategy=TimeBucketStrategy.DAILY,
        mongo_format="%Y-%m-%d",
    ),
}

HOURLY_SPAN_LIMIT = timedelta(hours=48)
HOURLY_MODE_WINDOW = timedelta(hours=24)
DEFAULT_DAYS = 7
EXTENDED_DAYS = 30


class TimelineWindow(NamedTuple):
    """Bucket configuration plus the implicit lower bound it imposes (if any)."""

    bucket_config: TimeBucketConfig
    since: Optional[datetime]


def get_bucket_config(strategy: TimeBucketStrategy) -> TimeBucketConfig:
    """Get the bucket configuration for a given strategy"""
    return BUCKET_CONFIGS[strategy]


def determine_bucket_strategy(
    start_date: datetime, end_date: datetime
) -> TimeBucketStrategy:
    """
    Pick hourly or daily buckets for an explicit range.

    The 48-hour boundary is inclusive: a span of exactly 48 hours is hourly.
    """
    if end_date - start_date <= HOURLY_SPAN_LIMIT:
        return TimeBucketStrategy.HOURLY
    return TimeBucketStrategy.DAILY


def select_timeline_window(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    mode: Optional[str],
    days: Optional[str],
    now: datetime,
) -> TimelineWindow:
    """
    Apply the timeline bucket-selection policy.

    Args:
        start_date: Parsed ``start`` (``None`` if absent or malformed)
        end_date: Parsed ``end`` (``None`` if absent or malformed)
        mode: Raw ``mode`` query value; only ``"hourly"`` is meaningful
        days: Raw ``days`` query value; only ``"30"`` changes the default
        now: Current UTC time

    Returns:
        TimelineWindow with the bucket config and the implicit ``since``
        bound (``None`` when the caller's explicit range applies).
    """
    if start_date is not None and end_date is not None:
        strategy = determine_bucket_strategy(start_date, end_date)
        return TimelineWindow(get_bucket_config(strategy), None)

    if mode == "hourly":
        return TimelineWindow(
            get_bucket_config(TimeBucketStrategy.HOURLY), now - HOURLY_MODE_WINDOW
        )

    window_days = EXTENDED_DAYS if str(days or "").strip() == "30" else DEFAULT_DAYS
    return TimelineWindow(
        get_bucket_config(TimeBucketStrategy.DAILY), now - timedelta(days=window_days)
    )


def create_mongo_time_bucket_expression(
    bucket_config: TimeBucketConfig, clicked_at_field: str = "clicked_at"
) -> Dict[str, Any]:
    """
    Create the ``$dateToString`` expression that labels a click's bucket.

    Labels are rendered in UTC, the ``$dateToString`` default.

    Args:
        bucket_config: The bucket configuration to use
        clicked_at_field: Name of the datetime field in the collection

    Returns:
        Aggregation expression usable as a ``$group`` key
    """
    return {
        "$dateToString": {
            "format": bucket_config.mongo_format,
            "date": f"${clicked_at_field}",
        }
    }
