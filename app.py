"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient
from pymongo.errors import PyMongoError

from config import AppSettings
from errors import register_error_handlers
from infrastructure.cache.geo_cache import GeoCache
from infrastructure.cache.redis_client import create_redis_client
from infrastructure.geo.ip_api import IpApiGeoProvider
from infrastructure.http_client import HttpClient
from repositories.click_repository import ClickRepository
from repositories.user_repository import UserRepository
from routes.analytics_routes import router as analytics_router
from routes.click_routes import router as click_router
from routes.health_routes import router as health_router
from services.analytics_service import AnalyticsService
from services.click_service import ClickService
from services.enrichment import EnrichmentDispatcher
from services.geo_enricher import GeoEnricher
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        env=settings.env,
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        sampling_rates={
            "click_recorded": settings.logging.sample_rate_click,
            "analytics_query": settings.logging.sample_rate_analytics,
        },
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        click_repository = ClickRepository(
            db[settings.db.clicks_collection],
            query_timeout_ms=settings.query_timeout_ms,
        )
        try:
            await click_repository.ensure_indexes()
        except PyMongoError as e:
            log.warning(
                "index_creation_failed", error=str(e), error_type=type(e).__name__
            )

        # Redis is optional; it only caches geo lookups
        redis_client = await create_redis_client(settings.redis.redis_uri)
        app.state.redis = redis_client

        enricher = GeoEnricher(
            IpApiGeoProvider(
                HttpClient(timeout=settings.geo.geo_lookup_timeout_seconds),
                url_template=settings.geo.geo_lookup_url,
            ),
            GeoCache(redis_client, ttl_seconds=settings.redis.geo_cache_ttl_seconds),
        )
        dispatcher = EnrichmentDispatcher(
            enricher,
            click_repository,
            workers=settings.geo.enrichment_workers,
            queue_size=settings.geo.enrichment_queue_size,
            job_timeout=settings.geo.enrichment_timeout_seconds,
            update_timeout=settings.geo.enrichment_update_timeout_seconds,
        )
        dispatcher.start()

        app.state.dispatcher = dispatcher
        app.state.user_repository = UserRepository(db[settings.db.users_collection])
        app.state.click_service = ClickService(click_repository, dispatcher)
        app.state.analytics_service = AnalyticsService(click_repository)

        log.info("app_started", app_name=settings.app_name, env=settings.env)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await dispatcher.stop()
        await enricher.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # all origins allowed with credentials support.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(click_router)
    app.include_router(analytics_router)

    return app
