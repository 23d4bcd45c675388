"""
Resolves a visitor address to a GeoLocation.

Non-public addresses (private, loopback, link-local, reserved) never reach
the provider. Successful lookups are cached by ip_hash when Redis is
available.
"""

from __future__ import annotations

from typing import Optional

from infrastructure.cache.geo_cache import GeoCache
from infrastructure.geo.protocol import GeoLookupProvider
from schemas.models.click import GeoLocation
from shared.ip_utils import is_public_ip
from shared.logging import get_logger

log = get_logger(__name__)


class GeoEnricher:
    def __init__(
        self, provider: GeoLookupProvider, cache: Optional[GeoCache] = None
    ) -> None:
        self._provider = provider
        self._cache = cache

    async def locate(self, ip_address: str, ip_hash: str) -> Optional[GeoLocation]:
        if not is_public_ip(ip_address):
            return None

        if self._cache is not None:
            cached = await self._cache.get(ip_hash)
            if cached is not None:
                return cached

        geo = await self._provider.lookup(ip_address)
        if geo is not None and self._cache is not None:
            await self._cache.set(ip_hash, geo)
        return geo

    async def aclose(self) -> None:
        await self._provider.aclose()
