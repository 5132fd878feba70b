"""Signed session tokens for GreenLands users.

A token names the user (``sub``) and the role it was minted for. Nothing
is stored server-side: a token stays usable until ``exp`` passes, and the
per-request user lookup is what catches deactivated accounts.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from greenlands.config import settings

_TOKEN_TYPE = "access"


class TokenError(Exception):
    """The presented token is expired, malformed or wrongly signed."""


def create_access_token(
    user_id: str,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)
    claims = {
        "sub": user_id,
        "role": role,
        "type": _TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Return the claims of a valid access token, else raise TokenError."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}") from e

    if claims.get("type") != _TOKEN_TYPE or not claims.get("sub"):
        raise TokenError("Invalid token: not an access token")
    return claims
