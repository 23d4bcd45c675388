"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain async functions
used with FastAPI's Depends() system. Long-lived objects (repositories,
services, the enrichment dispatcher) are built once in the app lifespan and
stored on app.state.
"""

from __future__ import annotations

from fastapi import Depends, Request

from config import AppSettings
from errors import AuthenticationError
from repositories.user_repository import UserRepository
from services.analytics_service import AnalyticsService
from services.click_service import ClickService
from shared.auth import decode_access_token, extract_bearer_token


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_click_service(request: Request) -> ClickService:
    return request.app.state.click_service


async def get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


async def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


async def get_current_owner(
    request: Request,
    settings: AppSettings = Depends(get_settings),
    users: UserRepository = Depends(get_user_repository),
) -> str:
    """
    Resolve the caller's username from the bearer token.

    Raises:
        AuthenticationError: missing/invalid token or unknown user.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise AuthenticationError("Unauthorized")

    user_id = decode_access_token(
        token, settings.jwt.jwt_secret, settings.jwt.jwt_algorithm
    )
    user = await users.find_by_id(user_id)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user.username
