"""GeoLookupProvider protocol — services depend on this, not the concrete implementation."""

from typing import Optional, Protocol

from schemas.models.click import GeoLocation


class GeoLookupProvider(Protocol):
    async def lookup(self, ip_address: str) -> Optional[GeoLocation]: ...

    async def aclose(self) -> None: ...
