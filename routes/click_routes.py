"""
Public click-recording endpoint.

POST /api/clicks — called by the public page when a visitor opens a widget
link. Unauthenticated. Responds as soon as the event is stored; geo
enrichment continues in the background.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from dependencies import get_click_service
from schemas.dto.requests.click import RecordClickRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from services.click_service import ClickService
from shared.ip_utils import get_client_ip

router = APIRouter(prefix="/api", tags=["clicks"])


@router.post(
    "/clicks",
    status_code=201,
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def record_click(
    body: RecordClickRequest,
    request: Request,
    click_service: ClickService = Depends(get_click_service),
) -> MessageResponse:
    await click_service.record_click(
        body,
        client_ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return MessageResponse(message="Click recorded")
