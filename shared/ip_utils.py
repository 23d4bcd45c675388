"""
Client IP resolution and classification for FastAPI requests.
"""

from __future__ import annotations

import ipaddress
from typing import Sequence

from fastapi import Request

# Checked in priority order before falling back to the socket peer.
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
    "X-Client-IP",
)


def get_client_ip(
    request: Request, headers_to_check: Sequence[str] = PROXY_IP_HEADERS
) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    For list-valued headers (``X-Forwarded-For``) the first hop is used.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in headers_to_check:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip: str = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""


def is_public_ip(ip_address: str) -> bool:
    """Return True only for globally routable addresses worth geolocating.

    Loopback (``127.0.0.1``, ``::1``), RFC 1918 private ranges, link-local,
    reserved, multicast and unspecified addresses are all non-public, as is
    anything that does not parse as an IP address (``""``, ``"testclient"``).
    """
    try:
        addr = ipaddress.ip_address(ip_address.strip())
    except ValueError:
        return False
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped
    return not (
        addr.is_private
        or addr.is_loopback
        or addr.is_link_local
        or addr.is_reserved
        or addr.is_multicast
        or addr.is_unspecified
    )
