"""Finance API routes — always scoped to the calling farmer."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.finance import FinanceReport, TransactionCreate, TransactionRead
from greenlands.services.finance_service import FinanceService

router = APIRouter(prefix="/finance")

_finance = require_roles(API_POLICY["finance"])


def _svc(db: AsyncSession = Depends(get_db)) -> FinanceService:
    return FinanceService(db)


@router.get("/report", response_model=FinanceReport)
async def report(
    identity: CurrentIdentity = Depends(_finance),
    svc: FinanceService = Depends(_svc),
):
    return await svc.report(identity.uuid)


@router.post("/transactions", response_model=TransactionRead, status_code=201)
async def record_transaction(
    body: TransactionCreate,
    identity: CurrentIdentity = Depends(_finance),
    svc: FinanceService = Depends(_svc),
):
    return await svc.record(identity.uuid, **body.model_dump())
