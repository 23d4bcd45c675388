"""
Access-token helpers — framework-agnostic.

Tokens are HMAC-signed JWTs issued by the account service. The ``id`` claim
carries the user's ObjectId as a hex string.
"""

from __future__ import annotations

from typing import Optional

import jwt
from bson import ObjectId

from errors import AuthenticationError


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not auth_header:
        return None
    if auth_header.lower().startswith("bearer "):
        auth_header = auth_header.split(" ", 1)[1]
    token = auth_header.strip()
    return token or None


def decode_access_token(
    token: str, secret: str, algorithm: str = "HS256"
) -> ObjectId:
    """Verify *token* and return the user id it was issued for.

    Raises:
        AuthenticationError: bad signature, expired, or no valid ``id`` claim.
    """
    if not secret:
        raise AuthenticationError("Unauthorized")
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Unauthorized") from e

    user_id = claims.get("id")
    # ObjectId.is_valid also accepts raw 12-byte strings
    if not isinstance(user_id, str) or len(user_id) != 24:
        raise AuthenticationError("Unauthorized")
    if not ObjectId.is_valid(user_id):
        raise AuthenticationError("Unauthorized")
    return ObjectId(user_id)
