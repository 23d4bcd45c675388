"""
Referrer normalization — framework-agnostic, pure functions.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

DIRECT_REFERRER = "Direct"


def resolve_referrer_domain(referrer: Optional[str]) -> str:
    """Reduce a raw referrer to a bare hostname, or ``"Direct"``.

    - empty / whitespace-only → ``"Direct"``
    - unparseable → ``"Direct"``
    - no host component (relative reference, ``example.com/page``) → ``"Direct"``
    - otherwise the lower-cased host without port, with one leading
      ``www.`` removed

    Examples:
        >>> resolve_referrer_domain("https://www.example.com/x")
        'example.com'
        >>> resolve_referrer_domain("/relative/path")
        'Direct'
    """
    raw = (referrer or "").strip()
    if not raw:
        return DIRECT_REFERRER
    try:
        host = urlsplit(raw).hostname
    except ValueError:
        return DIRECT_REFERRER
    if not host:
        return DIRECT_REFERRER
    if host.startswith("www."):
        host = host[len("www."):]
    return host or DIRECT_REFERRER
