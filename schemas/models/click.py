"""
Click event document model.

Maps to the `clicks` MongoDB collection. One document per widget link click:

  inserted by the click recorder without geo fields
  → patched at most once by the enrichment worker with all four geo fields
  → never mutated again

The geo group is modelled as a single optional ``GeoLocation`` so the
all-or-nothing invariant holds on the Python side; in MongoDB the four fields
live at the top level (``country``, ``country_code``, ``region``, ``city``)
where the aggregation pipelines read them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.models.base import MongoBaseModel

GEO_FIELDS = ("country", "country_code", "region", "city")


class GeoLocation(BaseModel):
    """Result of a successful geolocation lookup."""

    model_config = ConfigDict(frozen=True)

    country: str
    country_code: str = ""
    region: str = ""
    city: str = ""

    def to_mongo_set(self) -> dict[str, str]:
        """Fields for the single ``$set`` that attaches this location to a click."""
        return {
            "country": self.country,
            "country_code": self.country_code,
            "region": self.region,
            "city": self.city,
        }


class ClickEventDoc(MongoBaseModel):
    """Document model for the `clicks` collection."""

    widget_id: str = Field(min_length=1)
    owner_username: str = Field(min_length=1)
    url: str = ""

    # Widget metadata denormalised at click time; omitted when empty
    custom_title: Optional[str] = None
    custom_image: Optional[str] = None

    ip_hash: str
    referrer_domain: str
    device_type: str
    clicked_at: datetime

    geo: Optional[GeoLocation] = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _collect_geo_fields(cls, data: Any) -> Any:
        """Fold flat ``country``/``region``/... keys from MongoDB into ``geo``."""
        if not isinstance(data, dict) or data.get("geo") is not None:
            return data
        flat = {key: data.get(key) for key in GEO_FIELDS}
        remaining = {k: v for k, v in data.items() if k not in GEO_FIELDS}
        if flat["country"]:
            remaining["geo"] = GeoLocation(
                **{key: value or "" for key, value in flat.items()}
            )
        return remaining

    def to_mongo(self) -> dict:
        data = super().to_mongo()
        for key in ("custom_title", "custom_image"):
            if not data.get(key):
                data.pop(key, None)
        if self.geo is not None:
            data.update(self.geo.to_mongo_set())
        return data
