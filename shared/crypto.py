"""
Hashing helpers for visitor identity.

Click events never store a caller's address; they store its SHA-256 digest,
which is enough for distinct-visitor counting and for keying the geo cache.
"""

from __future__ import annotations

import hashlib


def hash_client_ip(ip_address: str) -> str:
    """Return the hex-encoded SHA-256 digest of *ip_address*.

    Args:
        ip_address: The resolved client address (may be empty).

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(ip_address.encode("utf-8")).hexdigest()
