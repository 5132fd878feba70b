"""Land API routes.

Reads are open to every signed-in role. Creating a parcel needs the
land.write role set and always records the caller as the owner; update
and delete additionally pass the owner-or-admin guard.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, ensure_can_mutate, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.land import LandCreate, LandRead, LandUpdate
from greenlands.services.analytics_service import AnalyticsService
from greenlands.services.land_service import LandService

router = APIRouter(prefix="/land")

_read = require_roles(API_POLICY["land.read"])
_write = require_roles(API_POLICY["land.write"])


def _svc(db: AsyncSession = Depends(get_db)) -> LandService:
    return LandService(db)


@router.get("", response_model=list[LandRead])
async def list_lands(
    _: CurrentIdentity = Depends(_read),
    svc: LandService = Depends(_svc),
):
    return await svc.list_lands()


@router.get("/stats/summary")
async def land_summary(
    _: CurrentIdentity = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await AnalyticsService(db).land_summary()


@router.get("/farmer/{farmer_id}", response_model=list[LandRead])
async def list_farmer_lands(
    farmer_id: uuid.UUID,
    _: CurrentIdentity = Depends(_read),
    svc: LandService = Depends(_svc),
):
    return await svc.list_lands(farmer_id=farmer_id)


@router.get("/{land_id}", response_model=LandRead)
async def get_land(
    land_id: uuid.UUID,
    _: CurrentIdentity = Depends(_read),
    svc: LandService = Depends(_svc),
):
    return await svc.get_land(land_id)


@router.post("", response_model=LandRead, status_code=201)
async def create_land(
    body: LandCreate,
    identity: CurrentIdentity = Depends(_write),
    svc: LandService = Depends(_svc),
):
    return await svc.create_land(identity.uuid, body.model_dump())


@router.put("/{land_id}", response_model=LandRead)
async def update_land(
    land_id: uuid.UUID,
    body: LandUpdate,
    identity: CurrentIdentity = Depends(_write),
    svc: LandService = Depends(_svc),
):
    land = await svc.get_land(land_id)
    ensure_can_mutate(identity, land.farmer_id)
    return await svc.update_land(land, body.model_dump(), actor_id=identity.user_id)


@router.delete("/{land_id}")
async def delete_land(
    land_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_write),
    svc: LandService = Depends(_svc),
):
    land = await svc.get_land(land_id)
    ensure_can_mutate(identity, land.farmer_id)
    await svc.delete_land(land, actor_id=identity.user_id)
    return {"message": "Land record removed"}
