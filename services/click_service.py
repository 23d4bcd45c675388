"""
ClickService — records widget link clicks.

Validation, visitor hashing, device classification and referrer
normalisation happen synchronously; geolocation is handed to the
enrichment workers after the event is durably stored.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId

from errors import ValidationError
from repositories.click_repository import ClickRepository
from schemas.dto.requests.click import RecordClickRequest
from schemas.models.click import ClickEventDoc
from services.enrichment import EnrichmentDispatcher, EnrichmentJob
from shared.crypto import hash_client_ip
from shared.datetime_utils import utcnow
from shared.device_detection import classify_device
from shared.logging import get_logger, should_sample
from shared.referrer import resolve_referrer_domain

log = get_logger(__name__)

REQUIRED_FIELDS = ("widget_id", "owner_username")


class ClickService:
    def __init__(
        self,
        repository: ClickRepository,
        dispatcher: Optional[EnrichmentDispatcher] = None,
    ) -> None:
        self._repository = repository
        self._dispatcher = dispatcher

    async def record_click(
        self,
        request: RecordClickRequest,
        client_ip: str,
        user_agent: Optional[str],
    ) -> ObjectId:
        """
        Persist one click event and schedule its geo enrichment.

        Raises:
            ValidationError: widget_id or owner_username is empty.
            StoreError: the insert failed; nothing is enqueued.
        """
        for field in REQUIRED_FIELDS:
            if not getattr(request, field):
                raise ValidationError(f"{field} is required", field=field)

        ip_hash = hash_client_ip(client_ip)
        doc = ClickEventDoc(
            widget_id=request.widget_id,
            owner_username=request.owner_username,
            url=request.url,
            custom_title=request.custom_title,
            custom_image=request.custom_image,
            ip_hash=ip_hash,
            referrer_domain=resolve_referrer_domain(request.referrer),
            device_type=classify_device(user_agent),
            clicked_at=utcnow(),
        )
        click_id = await self._repository.insert(doc)

        if self._dispatcher is not None:
            self._dispatcher.submit(
                EnrichmentJob(click_id=click_id, client_ip=client_ip, ip_hash=ip_hash)
            )

        if should_sample("click_recorded"):
            log.info(
                "click_recorded",
                click_id=str(click_id),
                widget_id=doc.widget_id,
                owner_username=doc.owner_username,
                device_type=doc.device_type,
                referrer_domain=doc.referrer_domain,
            )
        return click_id
