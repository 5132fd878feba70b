"""Admin user management: listing and soft delete / reactivation."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.user import ActiveUpdate, RoleName, UserRead
from greenlands.services.identity_service import IdentityService

router = APIRouter(prefix="/users")

_manage = require_roles(API_POLICY["users.manage"])


def _svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


@router.get("", response_model=list[UserRead])
async def list_users(
    role: Optional[RoleName] = None,
    _: CurrentIdentity = Depends(_manage),
    svc: IdentityService = Depends(_svc),
):
    return await svc.list_users(role=role)


@router.put("/{user_id}/active", response_model=UserRead)
async def set_active(
    user_id: uuid.UUID,
    body: ActiveUpdate,
    identity: CurrentIdentity = Depends(_manage),
    svc: IdentityService = Depends(_svc),
):
    return await svc.set_active(user_id, body.is_active, actor_id=identity.user_id)
