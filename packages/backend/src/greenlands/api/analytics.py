"""Analytics API routes — dashboard payloads from the aggregation engine."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics")

_read = require_roles(API_POLICY["analytics.read"])
_reports = require_roles(API_POLICY["analytics.reports"])


def _svc(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("")
async def overview(
    _: CurrentIdentity = Depends(_read),
    svc: AnalyticsService = Depends(_svc),
):
    return await svc.overview()


@router.get("/land")
async def land_analytics(
    _: CurrentIdentity = Depends(_read),
    svc: AnalyticsService = Depends(_svc),
):
    return await svc.land_stats()


@router.get("/farmers")
async def farmer_analytics(
    _: CurrentIdentity = Depends(_read),
    svc: AnalyticsService = Depends(_svc),
):
    return await svc.farmer_stats()


@router.get("/government")
async def government_analytics(
    _: CurrentIdentity = Depends(_read),
    svc: AnalyticsService = Depends(_svc),
):
    return await svc.government_stats()


@router.get("/trends")
async def trends(
    _: CurrentIdentity = Depends(_read),
    svc: AnalyticsService = Depends(_svc),
):
    return await svc.trends()


@router.get("/reports")
async def reports(
    type: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    _: CurrentIdentity = Depends(_reports),
    svc: AnalyticsService = Depends(_svc),
):
    """Custom report: land_summary, farmer_activity or crop_performance."""
    return await svc.report(type, start_date, end_date)
