"""Farmer API routes: profiles, crop and equipment sets, CSV report."""

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, ensure_can_mutate, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.user import CropAdd, EquipmentAdd, FarmerUpdate, UserRead
from greenlands.services.analytics_service import AnalyticsService
from greenlands.services.identity_service import IdentityService
from greenlands.services.land_service import LandService

router = APIRouter(prefix="/farmers")

_read = require_roles(API_POLICY["farmers.read"])
_update = require_roles(API_POLICY["farmers.update"])
_report = require_roles(API_POLICY["farmers.report"])


def _svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


# ─── Listing ────────────────────────────────────────────

@router.get("", response_model=list[UserRead])
async def list_farmers(
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.list_farmers()


@router.get("/stats/summary")
async def farmer_summary(
    _: CurrentIdentity = Depends(_read),
    db: AsyncSession = Depends(get_db),
):
    return await AnalyticsService(db).farmer_summary()


@router.get("/location/{location}", response_model=list[UserRead])
async def farmers_by_location(
    location: str,
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.farmers_by_location(location)


@router.get("/{farmer_id}", response_model=UserRead)
async def get_farmer(
    farmer_id: uuid.UUID,
    _: CurrentIdentity = Depends(_read),
    svc: IdentityService = Depends(_svc),
):
    return await svc.get_farmer(farmer_id)


# ─── Owner-or-admin mutations ───────────────────────────

@router.put("/{farmer_id}", response_model=UserRead)
async def update_farmer(
    farmer_id: uuid.UUID,
    body: FarmerUpdate,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    ensure_can_mutate(identity, farmer_id)
    farm_details = body.farm_details.model_dump() if body.farm_details else None
    return await svc.update_farmer(
        farmer_id,
        name=body.name,
        phone=body.phone,
        location=body.location,
        farm_details=farm_details,
        actor_id=identity.user_id,
    )


@router.post("/{farmer_id}/crops", response_model=UserRead)
async def add_crop(
    farmer_id: uuid.UUID,
    body: CropAdd,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    """Add a crop to the farmer's set; adding an existing crop is a no-op."""
    ensure_can_mutate(identity, farmer_id)
    return await svc.add_crop(farmer_id, body.crop)


@router.delete("/{farmer_id}/crops/{crop}", response_model=UserRead)
async def remove_crop(
    farmer_id: uuid.UUID,
    crop: str,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    ensure_can_mutate(identity, farmer_id)
    return await svc.remove_crop(farmer_id, crop)


@router.post("/{farmer_id}/equipment", response_model=UserRead)
async def add_equipment(
    farmer_id: uuid.UUID,
    body: EquipmentAdd,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    ensure_can_mutate(identity, farmer_id)
    return await svc.add_equipment(farmer_id, body.equipment)


@router.delete("/{farmer_id}/equipment/{item}", response_model=UserRead)
async def remove_equipment(
    farmer_id: uuid.UUID,
    item: str,
    identity: CurrentIdentity = Depends(_update),
    svc: IdentityService = Depends(_svc),
):
    ensure_can_mutate(identity, farmer_id)
    return await svc.remove_equipment(farmer_id, item)


@router.get("/{farmer_id}/report")
async def farmer_report(
    farmer_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_report),
    db: AsyncSession = Depends(get_db),
):
    """CSV download of the farmer's land parcels."""
    ensure_can_mutate(identity, farmer_id)
    filename, content = await LandService(db).farmer_report(farmer_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
