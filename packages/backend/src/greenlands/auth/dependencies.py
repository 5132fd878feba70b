"""FastAPI auth dependencies.

These are used as Depends() in route handlers to extract and validate the
current identity from the Authorization: Bearer header, and to gate routes
by role before the handler body runs.

The token names the user and the role it was issued for, but the role
used for decisions is re-read from the users table on every request, so a
deactivated account or a changed role takes effect immediately.
"""

import uuid
from typing import Iterable, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.jwt import TokenError, verify_token
from greenlands.auth.policy import Decision, authorize, can_mutate
from greenlands.db.engine import get_db
from greenlands.db.models import User
from greenlands.errors import Forbidden, InvalidToken, Unauthenticated


class CurrentIdentity:
    """The authenticated user making the request."""

    def __init__(
        self,
        user_id: str,
        role: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ):
        self.user_id = user_id
        self.role = role
        self.email = email
        self.name = name

    @property
    def uuid(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)

    def has_role(self, *roles: str) -> bool:
        return authorize(self.role, roles) is Decision.PERMIT

    def can_mutate(self, owner_id) -> bool:
        return can_mutate(self.user_id, self.role, owner_id)


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no auth header)."""
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise InvalidToken("Token is not valid")
    return await resolve_token(authorization[7:].strip(), db)


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no auth)."""
    if not identity:
        raise Unauthenticated()
    return identity


async def resolve_token(token: str, db: AsyncSession) -> CurrentIdentity:
    """Token → identity, or InvalidToken."""
    try:
        payload = verify_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except (TokenError, ValueError) as e:
        raise InvalidToken(str(e) if isinstance(e, TokenError) else "Token is not valid")

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise InvalidToken("Token is not valid")

    return CurrentIdentity(
        user_id=str(user.id),
        role=user.role,
        email=user.email,
        name=user.name,
    )


def require_roles(allowed_roles: Iterable):
    """Dependency factory: 403 unless the caller's role is in allowed_roles."""
    allowed = frozenset(allowed_roles)

    async def _check(
        identity: CurrentIdentity = Depends(get_current_user),
    ) -> CurrentIdentity:
        if authorize(identity.role, allowed) is Decision.DENY:
            raise Forbidden("Forbidden")
        return identity

    return _check


def ensure_can_mutate(identity: CurrentIdentity, owner_id) -> None:
    """Owner-or-admin check for resource-scoped writes."""
    if not identity.can_mutate(owner_id):
        raise Forbidden("Not authorized")
