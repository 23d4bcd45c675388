"""Unit tests for MongoDB document models."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from schemas.models.base import MongoBaseModel, PyObjectId
from schemas.models.click import ClickEventDoc, GeoLocation
from schemas.models.user import UserDoc


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _click_fields(**overrides) -> dict:
    fields = {
        "widget_id": "w1",
        "owner_username": "alice",
        "url": "https://example.com",
        "ip_hash": "a" * 64,
        "referrer_domain": "Direct",
        "device_type": "desktop",
        "clicked_at": _now(),
    }
    fields.update(overrides)
    return fields


# ---------------------------------------------------------------------------
# PyObjectId / MongoBaseModel
# ---------------------------------------------------------------------------


class _Doc(MongoBaseModel):
    name: str = "x"


class TestPyObjectId:
    def test_accepts_object_id(self):
        oid = ObjectId()
        assert _Doc(_id=oid).id == oid

    def test_accepts_hex_string(self):
        oid = ObjectId()
        assert _Doc(_id=str(oid)).id == oid

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            _Doc(_id="nope")

    def test_python_dump_keeps_object_id(self):
        oid = ObjectId()
        assert isinstance(_Doc(_id=oid).model_dump()["id"], ObjectId)

    def test_json_dump_is_hex_string(self):
        oid = ObjectId()
        assert _Doc(_id=oid).model_dump(mode="json")["id"] == str(oid)

    def test_is_object_id_subclass(self):
        assert issubclass(PyObjectId, ObjectId)


class TestMongoBaseModel:
    def test_to_mongo_drops_none_id(self):
        assert "_id" not in _Doc().to_mongo()

    def test_to_mongo_uses_alias(self):
        oid = ObjectId()
        assert _Doc(_id=oid).to_mongo()["_id"] == oid

    def test_from_mongo_none_passthrough(self):
        assert _Doc.from_mongo(None) is None


# ---------------------------------------------------------------------------
# GeoLocation
# ---------------------------------------------------------------------------


class TestGeoLocation:
    def test_to_mongo_set_has_all_four_fields(self):
        geo = GeoLocation(country="United States", country_code="US", region="Texas", city="Austin")
        assert geo.to_mongo_set() == {
            "country": "United States",
            "country_code": "US",
            "region": "Texas",
            "city": "Austin",
        }

    def test_optional_parts_default_empty(self):
        geo = GeoLocation(country="Iceland")
        assert geo.to_mongo_set() == {
            "country": "Iceland",
            "country_code": "",
            "region": "",
            "city": "",
        }

    def test_frozen(self):
        geo = GeoLocation(country="Iceland")
        with pytest.raises(ValidationError):
            geo.country = "Norway"


# ---------------------------------------------------------------------------
# ClickEventDoc
# ---------------------------------------------------------------------------


class TestClickEventDoc:
    @pytest.mark.parametrize("field", ["widget_id", "owner_username"])
    def test_identity_fields_must_be_non_empty(self, field):
        with pytest.raises(ValidationError):
            ClickEventDoc(**_click_fields(**{field: ""}))

    def test_to_mongo_without_geo_has_no_geo_fields(self):
        data = ClickEventDoc(**_click_fields()).to_mongo()
        for key in ("country", "country_code", "region", "city", "geo"):
            assert key not in data
        assert "_id" not in data
        assert data["widget_id"] == "w1"

    def test_to_mongo_drops_empty_widget_metadata(self):
        data = ClickEventDoc(**_click_fields(custom_title="", custom_image=None)).to_mongo()
        assert "custom_title" not in data
        assert "custom_image" not in data

    def test_to_mongo_keeps_widget_metadata(self):
        data = ClickEventDoc(
            **_click_fields(custom_title="My Shop", custom_image="https://img/x.png")
        ).to_mongo()
        assert data["custom_title"] == "My Shop"
        assert data["custom_image"] == "https://img/x.png"

    def test_to_mongo_flattens_geo(self):
        doc = ClickEventDoc(
            **_click_fields(), geo=GeoLocation(country="Germany", country_code="DE", region="Berlin", city="Berlin")
        )
        data = doc.to_mongo()
        assert data["country"] == "Germany"
        assert data["country_code"] == "DE"
        assert data["region"] == "Berlin"
        assert data["city"] == "Berlin"
        assert "geo" not in data

    def test_from_mongo_folds_flat_geo_fields(self):
        raw = {
            "_id": ObjectId(),
            **_click_fields(),
            "country": "France",
            "country_code": "FR",
            "region": "",
            "city": None,
        }
        doc = ClickEventDoc.from_mongo(raw)
        assert doc.geo == GeoLocation(country="France", country_code="FR")

    def test_from_mongo_without_country_has_no_geo(self):
        doc = ClickEventDoc.from_mongo({"_id": ObjectId(), **_click_fields()})
        assert doc.geo is None


# ---------------------------------------------------------------------------
# UserDoc
# ---------------------------------------------------------------------------


class TestUserDoc:
    def test_reads_username_and_ignores_the_rest(self):
        oid = ObjectId()
        user = UserDoc.from_mongo({"_id": oid, "username": "alice", "password": "hash", "role": "user"})
        assert user.id == oid
        assert user.username == "alice"
        assert not hasattr(user, "password")
