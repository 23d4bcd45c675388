"""Unit tests for the analytics filter builder and aggregation strategies."""

from datetime import datetime, timezone

import pytest

from builders.aggregations import (
    CLICK_LOG_LIMIT,
    TOP_LOCATIONS_LIMIT,
    TOP_REFERRERS_LIMIT,
    ClickLogAggregationStrategy,
    DeviceAggregationStrategy,
    GeoAggregationStrategy,
    LocationIndexAggregationStrategy,
    ReferrerAggregationStrategy,
    TimelineAggregationStrategy,
    WidgetStatsAggregationStrategy,
    format_location_label,
)
from builders.click_filter import HAS_COUNTRY, ClickFilterBuilder
from schemas.dto.requests.analytics import AnalyticsQuery
from shared.time_bucket_utils import BUCKET_CONFIGS, TimeBucketStrategy

MATCH = {"owner_username": "alice"}


def _stage(pipeline, name):
    return next(stage[name] for stage in pipeline if name in stage)


# ── format_location_label ─────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "city, region, country, expected",
    [
        ("Austin", "Texas", "USA", "Austin, Texas"),
        ("Austin", "", "USA", "Austin, USA"),
        ("", "Texas", "USA", "Texas, USA"),
        ("", "", "USA", "USA"),
        ("", "", "", "Unknown Location"),
        (None, None, None, "Unknown Location"),
        ("Austin", "", "", "Unknown Location"),
        ("", "Texas", "", "Unknown Location"),
    ],
    ids=[
        "city_region",
        "city_country",
        "region_country",
        "country_only",
        "all_empty",
        "all_none",
        "city_alone",
        "region_alone",
    ],
)
def test_format_location_label(city, region, country, expected):
    assert format_location_label(city, region, country) == expected


def test_format_location_label_custom_default():
    assert format_location_label("", "", "", default="Unknown") == "Unknown"


# ── ClickFilterBuilder ────────────────────────────────────────────────────────


class TestClickFilterBuilder:
    START = datetime(2024, 1, 1, tzinfo=timezone.utc)
    END = datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_owner_only(self):
        assert ClickFilterBuilder("alice").build() == {"owner_username": "alice"}

    def test_closed_range(self):
        query = ClickFilterBuilder("alice").with_time_range(self.START, self.END).build()
        assert query["clicked_at"] == {"$gte": self.START, "$lte": self.END}

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (START, None, {"$gte": START}),
            (None, END, {"$lte": END}),
        ],
        ids=["start_only", "end_only"],
    )
    def test_half_open_range(self, start, end, expected):
        query = ClickFilterBuilder("alice").with_time_range(start, end).build()
        assert query["clicked_at"] == expected

    def test_since_replaces_range(self):
        since = datetime(2024, 3, 1, tzinfo=timezone.utc)
        query = (
            ClickFilterBuilder("alice")
            .with_time_range(self.START, self.END)
            .with_since(since)
            .build()
        )
        assert query["clicked_at"] == {"$gte": since}

    def test_location_filters(self):
        query = ClickFilterBuilder("alice").with_location("USA", "Texas").build()
        assert query["country"] == "USA"
        assert query["region"] == "Texas"

    def test_require_country_when_unfiltered(self):
        query = ClickFilterBuilder("alice").require_country().build()
        assert query["country"] == HAS_COUNTRY

    def test_require_country_keeps_explicit_country(self):
        query = ClickFilterBuilder("alice").with_location("USA").require_country().build()
        assert query["country"] == "USA"

    def test_from_query_ignores_malformed_bounds(self):
        q = AnalyticsQuery(start="garbage", end="2024-01-31T00:00:00Z", country="null")
        query = ClickFilterBuilder.from_query("alice", q).build()
        assert query == {"owner_username": "alice", "clicked_at": {"$lte": self.END}}


# ── Strategies ────────────────────────────────────────────────────────────────


class TestWidgetStatsStrategy:
    def test_pipeline_counts_distinct_ip_hashes(self):
        pipeline = WidgetStatsAggregationStrategy().build_pipeline(MATCH)
        assert pipeline[0] == {"$match": MATCH}
        group = _stage(pipeline, "$group")
        assert group["_id"] == "$widget_id"
        assert group["unique_ips"] == {"$addToSet": "$ip_hash"}
        assert group["url"] == {"$first": "$url"}
        assert _stage(pipeline, "$sort") == {"total": -1, "_id": 1}

    def test_format_fills_missing_metadata(self):
        rows = WidgetStatsAggregationStrategy().format_results(
            [{"_id": "w1", "url": "https://x.io", "custom_title": None, "total": 3, "unique": 2}]
        )
        assert rows == [
            {
                "widget_id": "w1",
                "url": "https://x.io",
                "custom_title": "",
                "custom_image": "",
                "total": 3,
                "unique": 2,
            }
        ]


class TestTimelineStrategy:
    @pytest.mark.parametrize(
        "strategy, fmt",
        [
            (TimeBucketStrategy.HOURLY, "%Y-%m-%d %H:00"),
            (TimeBucketStrategy.DAILY, "%Y-%m-%d"),
        ],
    )
    def test_groups_by_bucket_label(self, strategy, fmt):
        pipeline = TimelineAggregationStrategy(BUCKET_CONFIGS[strategy]).build_pipeline(MATCH)
        group = _stage(pipeline, "$group")
        assert group["_id"]["$dateToString"]["format"] == fmt
        assert _stage(pipeline, "$sort") == {"_id": 1}

    def test_format(self):
        strategy = TimelineAggregationStrategy(BUCKET_CONFIGS[TimeBucketStrategy.DAILY])
        assert strategy.format_results([{"_id": "2024-01-01", "total": 4}]) == [
            {"date": "2024-01-01", "total": 4}
        ]


class TestRankingStrategies:
    def test_referrers_capped_at_20(self):
        pipeline = ReferrerAggregationStrategy().build_pipeline(MATCH)
        assert _stage(pipeline, "$limit") == TOP_REFERRERS_LIMIT == 20
        assert _stage(pipeline, "$sort") == {"count": -1, "_id": 1}

    def test_referrers_format(self):
        rows = ReferrerAggregationStrategy().format_results([{"_id": "Direct", "count": 5}])
        assert rows == [{"domain": "Direct", "count": 5}]

    def test_devices_uncapped(self):
        pipeline = DeviceAggregationStrategy().build_pipeline(MATCH)
        assert not any("$limit" in stage for stage in pipeline)
        assert _stage(pipeline, "$group")["_id"] == "$device_type"

    def test_devices_format(self):
        rows = DeviceAggregationStrategy().format_results([{"_id": "mobile", "count": 2}])
        assert rows == [{"device_type": "mobile", "count": 2}]


class TestGeoStrategy:
    def test_groups_by_location_triple_and_caps_at_30(self):
        pipeline = GeoAggregationStrategy().build_pipeline(MATCH)
        group = _stage(pipeline, "$group")
        assert set(group["_id"]) == {"country", "region", "city"}
        assert group["country_code"] == {"$first": "$country_code"}
        assert _stage(pipeline, "$limit") == TOP_LOCATIONS_LIMIT == 30

    def test_format_labels(self):
        rows = GeoAggregationStrategy().format_results(
            [
                {"_id": {"country": "USA", "region": "Texas", "city": "Austin"}, "country_code": "US", "count": 3},
                {"_id": {"country": "USA", "region": "Texas", "city": ""}, "country_code": "US", "count": 2},
                {"_id": {}, "count": 1},
            ]
        )
        assert [r["location"] for r in rows] == ["Austin, Texas", "Texas, USA", "Unknown Location"]
        assert rows[0]["country_code"] == "US"
        assert rows[2]["country_code"] == ""


class TestClickLogStrategy:
    def test_groups_by_day_and_caps_at_200(self):
        pipeline = ClickLogAggregationStrategy().build_pipeline(MATCH)
        group = _stage(pipeline, "$group")
        assert group["_id"]["day"] == {
            "$dateToString": {"format": "%Y-%m-%d", "date": "$clicked_at"}
        }
        assert group["clicked_at"] == {"$max": "$clicked_at"}
        assert _stage(pipeline, "$sort")["clicked_at"] == -1
        assert _stage(pipeline, "$limit") == CLICK_LOG_LIMIT == 200

    def test_format_assigns_ids_and_unknown_label(self):
        ts = datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
        rows = ClickLogAggregationStrategy().format_results(
            [
                {"_id": {"url": "https://a", "device_type": "mobile", "referrer_domain": "Direct"}, "clicked_at": ts, "count": 2},
                {"_id": {"url": "https://b", "country": "USA", "city": "Austin", "country_code": "US"}, "clicked_at": ts, "count": 1},
            ]
        )
        assert [r["id"] for r in rows] == ["agg-0", "agg-1"]
        assert rows[0]["location"] == "Unknown"
        assert rows[0]["country_code"] == ""
        assert rows[1]["location"] == "Austin, USA"
        assert rows[0]["count"] == 2

    def test_format_marks_naive_timestamps_as_utc(self):
        rows = ClickLogAggregationStrategy().format_results(
            [{"_id": {"url": "https://a"}, "clicked_at": datetime(2024, 1, 1, 9), "count": 1}]
        )
        assert rows[0]["clicked_at"] == datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
        assert rows[0]["clicked_at"].tzinfo is not None


class TestLocationIndexStrategy:
    def test_double_group(self):
        pipeline = LocationIndexAggregationStrategy().build_pipeline(MATCH)
        groups = [stage["$group"] for stage in pipeline if "$group" in stage]
        assert len(groups) == 2
        assert groups[1]["regions"] == {"$addToSet": "$_id.region"}
        assert _stage(pipeline, "$sort") == {"_id": 1}

    def test_format_drops_empty_regions_and_sorts(self):
        rows = LocationIndexAggregationStrategy().format_results(
            [{"_id": "USA", "regions": ["Texas", "", None, "Ohio"]}]
        )
        assert rows == [{"country": "USA", "regions": ["Ohio", "Texas"]}]
