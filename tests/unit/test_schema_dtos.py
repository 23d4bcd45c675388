"""Unit tests for request and response DTOs."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from schemas.dto.requests.analytics import AnalyticsQuery, TimelineQuery
from schemas.dto.requests.click import RecordClickRequest
from schemas.dto.responses.analytics import (
    ClickLogItem,
    LocationItem,
    WidgetClickStat,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse


# ---------------------------------------------------------------------------
# RecordClickRequest
# ---------------------------------------------------------------------------


class TestRecordClickRequest:
    def test_identity_fields_are_trimmed(self):
        req = RecordClickRequest(widget_id="  w1 ", owner_username="\talice\n", url=" https://x.io ")
        assert req.widget_id == "w1"
        assert req.owner_username == "alice"
        assert req.url == "https://x.io"

    def test_missing_fields_default_to_empty(self):
        req = RecordClickRequest()
        assert req.widget_id == ""
        assert req.owner_username == ""
        assert req.url == ""
        assert req.referrer is None

    def test_null_identity_becomes_empty(self):
        req = RecordClickRequest(widget_id=None, owner_username=None)
        assert req.widget_id == ""
        assert req.owner_username == ""

    def test_unknown_fields_ignored(self):
        req = RecordClickRequest.model_validate({"widget_id": "w1", "owner_username": "a", "extra": 1})
        assert not hasattr(req, "extra")


# ---------------------------------------------------------------------------
# AnalyticsQuery / TimelineQuery
# ---------------------------------------------------------------------------


class TestAnalyticsQuery:
    def test_parses_bounds(self):
        q = AnalyticsQuery(start="2024-01-01T00:00:00Z", end="2024-01-02T00:00:00Z")
        assert q.start_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert q.end_date == datetime(2024, 1, 2, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["garbage", "null", "", "undefined"])
    def test_malformed_bounds_ignored(self, value):
        q = AnalyticsQuery(start=value, end=value)
        assert q.start_date is None
        assert q.end_date is None

    @pytest.mark.parametrize(
        "value, expected",
        [("USA", "USA"), (" USA ", "USA"), ("null", None), ("", None), (None, None)],
    )
    def test_location_filters_cleaned(self, value, expected):
        q = AnalyticsQuery(country=value, region=value)
        assert q.country == expected
        assert q.region == expected

    def test_parsed_bounds_excluded_from_dump(self):
        dumped = AnalyticsQuery(start="2024-01-01").model_dump()
        assert "start_date" not in dumped
        assert "end_date" not in dumped

    def test_log_context(self):
        q = AnalyticsQuery(start="2024-01-01T00:00:00Z", country="USA")
        assert q.log_context() == {
            "start": "2024-01-01T00:00:00+00:00",
            "end": None,
            "country": "USA",
            "region": None,
        }


class TestTimelineQuery:
    def test_mode_and_days(self):
        q = TimelineQuery(mode="hourly", days="30")
        assert q.mode == "hourly"
        assert q.days == "30"
        assert q.start_date is None

    def test_inherits_filters(self):
        q = TimelineQuery(region="Texas")
        assert q.region == "Texas"


# ---------------------------------------------------------------------------
# Response DTOs
# ---------------------------------------------------------------------------


class TestResponses:
    def test_widget_stat_defaults(self):
        stat = WidgetClickStat(widget_id="w1", total=3, unique=2)
        assert stat.model_dump() == {
            "widget_id": "w1",
            "url": "",
            "custom_title": "",
            "custom_image": "",
            "total": 3,
            "unique": 2,
        }

    def test_click_log_item_serialises_timestamp(self):
        item = ClickLogItem(
            id="agg-0",
            location="Unknown",
            clicked_at=datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc),
            count=2,
        )
        dumped = item.model_dump(mode="json")
        assert dumped["clicked_at"].startswith("2024-01-01T09:30:00")
        assert dumped["id"] == "agg-0"

    def test_location_item(self):
        assert LocationItem(country="USA", regions=["Texas"]).model_dump() == {
            "country": "USA",
            "regions": ["Texas"],
        }

    def test_error_response_optional_fields(self):
        err = ErrorResponse(error="Unauthorized", code="authentication_error")
        assert err.field is None
        assert err.details is None

    def test_message_response(self):
        assert MessageResponse(message="Click recorded").model_dump() == {"message": "Click recorded"}
