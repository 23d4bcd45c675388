"""
Data access for the ``clicks`` collection.

PyMongo failures are re-raised as ``StoreError`` so callers never see driver
exceptions. Request-path failures are logged at error level here; geo updates
are reported by the enrichment worker instead.
"""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from errors import StoreError
from schemas.models.click import ClickEventDoc, GeoLocation
from shared.logging import get_logger

log = get_logger(__name__)

DEFAULT_QUERY_TIMEOUT_MS = 10_000


class ClickRepository:
    def __init__(
        self,
        collection: AsyncCollection,
        query_timeout_ms: int = DEFAULT_QUERY_TIMEOUT_MS,
    ) -> None:
        self._col = collection
        self.query_timeout_ms = query_timeout_ms

    async def insert(self, doc: ClickEventDoc) -> ObjectId:
        """Insert a click event and return its ``_id``."""
        try:
            result = await self._col.insert_one(doc.to_mongo())
            return result.inserted_id
        except PyMongoError as e:
            log.error(
                "click_insert_failed",
                widget_id=doc.widget_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreError("Failed to record click") from e

    async def set_geo(self, click_id: ObjectId, geo: GeoLocation) -> bool:
        """
        Attach all four geo fields to a click in a single ``$set``.

        Only matches events that carry no country yet, so a click is enriched
        at most once. Returns True when a document was modified.

        Failures are not logged here; the enrichment worker reports them.
        """
        try:
            result = await self._col.update_one(
                {"_id": click_id, "country": {"$exists": False}},
                {"$set": geo.to_mongo_set()},
            )
            return result.modified_count == 1
        except PyMongoError as e:
            raise StoreError("Failed to update click location") from e

    async def aggregate(
        self, pipeline: list[dict[str, Any]], view: str = "analytics"
    ) -> list[dict[str, Any]]:
        """Run *pipeline* with the server-side time cap and materialise it."""
        try:
            cursor = await self._col.aggregate(
                pipeline, maxTimeMS=self.query_timeout_ms
            )
            return await cursor.to_list()
        except PyMongoError as e:
            log.error(
                "analytics_aggregation_failed",
                view=view,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreError("Failed to load analytics") from e

    async def ensure_indexes(self) -> None:
        await self._col.create_index(
            [("owner_username", ASCENDING), ("clicked_at", DESCENDING)]
        )
        await self._col.create_index(
            [("owner_username", ASCENDING), ("country", ASCENDING)]
        )
        await self._col.create_index([("widget_id", ASCENDING)])
        log.info("click_indexes_ensured")
