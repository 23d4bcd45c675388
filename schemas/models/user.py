"""
User document model.

Maps to the `users` MongoDB collection, which is owned by the account
service. Analytics only reads the ``username`` of the token's subject;
every other field is ignored.
"""

from __future__ import annotations

from pydantic import ConfigDict

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """Read-only projection of a `users` document."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    username: str
