"""Government official API routes."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, ensure_can_mutate, require_roles
from greenlands.auth.policy import API_POLICY, Role
from greenlands.db.engine import get_db
from greenlands.errors import Forbidden
from greenlands.schemas.user import OfficialUpdate, Permission, PermissionAdd, UserRead
from greenlands.services.analytics_service import AnalyticsService
from greenlands.services.identity_service import IdentityService

router = APIRouter(prefix="/government")

_read = require_roles(API_POLICY["government.read"])
_update = require_roles(API_POLICY["government.update"])
_permissions = require_roles(API_POLICY["government.permissions"])


def _svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


@router.get("", response_model=list[UserRead])
async def list_officials(
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.list_officials()


@router.get("/stats/summary")
async def government_summary(
    _: CurrentIdentity = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await AnalyticsService(db).government_stats()


@router.get("/department/{department}", response_model=list[UserRead])
async def officials_by_department(
    department: str,
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.officials_by_department(department)


@router.get("/{official_id}", response_model=UserRead)
async def get_official(
    official_id: uuid.UUID,
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.get_official(official_id)


@router.put("/{official_id}", response_model=UserRead)
async def update_official(
    official_id: uuid.UUID,
    body: OfficialUpdate,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    """Self or admin; only an admin may change the permission set."""
    ensure_can_mutate(identity, official_id)
    if body.permissions is not None and not identity.has_role(Role.ADMIN):
        raise Forbidden("Only admins can change permissions")
    return await svc.update_official(
        official_id,
        name=body.name,
        phone=body.phone,
        department=body.department,
        position=body.position,
        permissions=body.permissions,
        actor_id=identity.user_id,
    )


@router.post("/{official_id}/permissions", response_model=UserRead)
async def add_permission(
    official_id: uuid.UUID,
    body: PermissionAdd,
    identity: CurrentIdentity = Depends(_permissions),
    svc: IdentityService = Depends(_svc),
):
    return await svc.add_permission(official_id, body.permission, actor_id=identity.user_id)


@router.delete("/{official_id}/permissions/{permission}", response_model=UserRead)
async def remove_permission(
    official_id: uuid.UUID,
    permission: Permission,
    identity: CurrentIdentity = Depends(_permissions),
    svc: IdentityService = Depends(_svc),
):
    return await svc.remove_permission(official_id, permission, actor_id=identity.user_id)
