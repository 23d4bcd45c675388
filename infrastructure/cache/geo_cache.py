"""Redis cache for geolocation lookups.

Keyed by the visitor's ip_hash (never the raw address) and stored as JSON.
Only successful lookups are cached. All Redis failures degrade to a cache
miss so enrichment keeps working without Redis.
"""

import json
from typing import Optional

import redis.asyncio as aioredis

from schemas.models.click import GeoLocation
from shared.logging import get_logger, should_sample

log = get_logger(__name__)


class GeoCache:
    def __init__(
        self, redis_client: Optional[aioredis.Redis], ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _key(self, ip_hash: str) -> str:
        return f"geo_cache:{ip_hash}"

    async def get(self, ip_hash: str) -> Optional[GeoLocation]:
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(self._key(ip_hash))
            if raw is None:
                return None
            if should_sample("geo_cache"):
                log.debug("geo_cache_hit", ip_hash=ip_hash[:12])
            return GeoLocation(**json.loads(raw))
        except Exception as e:
            log.warning("geo_cache_get_error", error=str(e), error_type=type(e).__name__)
            return None

    async def set(self, ip_hash: str, geo: GeoLocation) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.setex(
                self._key(ip_hash),
                self.ttl_seconds,
                geo.model_dump_json(),
            )
        except Exception as e:
            log.warning("geo_cache_set_error", error=str(e), error_type=type(e).__name__)
