"""
Read-only access to the ``users`` collection.

Used to resolve a verified token's user id into the username that scopes
every analytics query.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from errors import StoreError
from schemas.models.user import UserDoc
from shared.logging import get_logger

log = get_logger(__name__)


class UserRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def find_by_id(self, user_id: ObjectId) -> Optional[UserDoc]:
        try:
            doc = await self._col.find_one({"_id": user_id}, {"username": 1})
        except PyMongoError as e:
            log.error(
                "user_find_failed",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreError("Failed to load user") from e
        if not doc or not doc.get("username"):
            return None
        return UserDoc.from_mongo(doc)
