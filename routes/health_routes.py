"""
Health check endpoint.

GET /health — probes MongoDB, Redis and the enrichment workers.

- MongoDB failure → "unhealthy" (503); clicks cannot be recorded without it.
- Redis failure or absence → "degraded" (200); Redis only caches geo lookups.
- Enrichment workers not running → "degraded" (200); clicks are still
  recorded, just without location.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


async def _check_mongo(request: Request) -> str:
    try:
        await request.app.state.db.client.admin.command("ping")
    except Exception:
        return "error"
    return "ok"


async def _check_redis(request: Request) -> str:
    redis = request.app.state.redis
    if redis is None:
        return "not_configured"
    try:
        await redis.ping()
    except Exception:
        return "error"
    return "ok"


def _check_enrichment(request: Request) -> str:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    return "ok" if dispatcher is not None and dispatcher.running else "stopped"


@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
async def health_check(request: Request) -> JSONResponse:
    checks = {
        "mongodb": await _check_mongo(request),
        "redis": await _check_redis(request),
        "enrichment": _check_enrichment(request),
    }

    if checks["mongodb"] != "ok":
        overall = "unhealthy"
    elif any(value != "ok" for value in checks.values()):
        overall = "degraded"
    else:
        overall = "healthy"

    body = HealthResponse(status=overall, checks=checks)
    return JSONResponse(
        status_code=503 if overall == "unhealthy" else 200,
        content=body.model_dump(),
    )
