"""
Request DTO for the public click-recording endpoint.

RecordClickRequest — POST /api/clicks (JSON body)

Identity fields are trimmed here; the emptiness check lives in the click
service so that it reports a ``validation_error`` naming the missing field.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class RecordClickRequest(BaseModel):
    """Body sent by the public page when a visitor opens a widget link."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    widget_id: str = ""
    owner_username: str = ""
    url: str = ""
    custom_title: Optional[str] = None
    custom_image: Optional[str] = None
    referrer: Optional[str] = None

    @field_validator("widget_id", "owner_username", "url", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v
