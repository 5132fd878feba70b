"""Subsidy API routes."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.subsidy import (
    ApplicationRead,
    ApplyRequest,
    ApplyResponse,
    ReviewRequest,
    SubsidyCreate,
    SubsidyRead,
)
from greenlands.services.subsidy_service import SubsidyService

router = APIRouter(prefix="/subsidies")


def _svc(db: AsyncSession = Depends(get_db)) -> SubsidyService:
    return SubsidyService(db)


@router.get("", response_model=list[SubsidyRead])
async def list_subsidies(
    _: CurrentIdentity = Depends(require_roles(API_POLICY["subsidies.read"])),
    svc: SubsidyService = Depends(_svc),
):
    """All programmes, nearest deadline first."""
    return await svc.list_subsidies()


@router.post("", response_model=SubsidyRead, status_code=201)
async def create_subsidy(
    body: SubsidyCreate,
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["subsidies.write"])),
    svc: SubsidyService = Depends(_svc),
):
    return await svc.create_subsidy(**body.model_dump(), actor_id=identity.user_id)


@router.post("/apply", response_model=ApplyResponse)
async def apply(
    body: ApplyRequest,
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["subsidies.apply"])),
    svc: SubsidyService = Depends(_svc),
):
    application = await svc.apply(identity.uuid, body.subsidy_id, body.application_data)
    return {"success": True, "application": application}


@router.get("/applications", response_model=list[ApplicationRead])
async def list_applications(
    identity: CurrentIdentity = Depends(
        require_roles(API_POLICY["subsidies.applications"])
    ),
    svc: SubsidyService = Depends(_svc),
):
    """Farmers see their own applications; reviewers see all of them."""
    if identity.has_role(*API_POLICY["subsidies.review"]):
        return await svc.list_applications()
    return await svc.list_applications(farmer_id=identity.uuid)


@router.put("/applications/{application_id}", response_model=ApplicationRead)
async def review_application(
    application_id: uuid.UUID,
    body: ReviewRequest,
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["subsidies.review"])),
    svc: SubsidyService = Depends(_svc),
):
    return await svc.review(
        application_id, body.status, reviewer_id=identity.uuid, review_note=body.review_note
    )
