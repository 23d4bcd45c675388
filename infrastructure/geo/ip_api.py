"""ip-api.com implementation of GeoLookupProvider.

Free JSON endpoint, no key. The service reports its own failures in-band
(``{"status": "fail", "message": "private range"}``) with HTTP 200, so the
``status`` field is checked as well as the response code.

Every failure mode yields ``None``; nothing is raised to the caller.
"""

from typing import Optional

import httpx

from infrastructure.http_client import HttpClient
from schemas.models.click import GeoLocation
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

IP_API_URL = "http://ip-api.com/json/{ip}"
IP_API_FIELDS = "status,country,countryCode,regionName,city"


class IpApiGeoProvider:
    def __init__(self, http_client: HttpClient, url_template: str = IP_API_URL) -> None:
        self._http = http_client
        self._url_template = url_template

    async def lookup(self, ip_address: str) -> Optional[GeoLocation]:
        url = self._url_template.format(ip=ip_address)
        try:
            data = await self._http.get_json(url, params={"fields": IP_API_FIELDS})
        except (httpx.HTTPError, ValueError) as e:
            log.debug(
                "geo_lookup_failed",
                provider="ip-api",
                ip=hash_ip(ip_address),
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not isinstance(data, dict) or data.get("status") != "success":
            log.debug(
                "geo_lookup_unsuccessful",
                provider="ip-api",
                ip=hash_ip(ip_address),
                message=data.get("message") if isinstance(data, dict) else None,
            )
            return None

        country = (data.get("country") or "").strip()
        if not country:
            return None
        return GeoLocation(
            country=country,
            country_code=(data.get("countryCode") or "").strip(),
            region=(data.get("regionName") or "").strip(),
            city=(data.get("city") or "").strip(),
        )

    async def aclose(self) -> None:
        await self._http.aclose()
