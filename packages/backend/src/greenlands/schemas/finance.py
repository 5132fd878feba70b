"""Schemas for the farmer ledger and its report."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from greenlands.schemas.base import CamelModel


class TransactionCreate(CamelModel):
    type: Literal["income", "expense"]
    amount: float = Field(..., ge=0)
    date: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)


class TransactionRead(CamelModel):
    id: uuid.UUID
    type: str
    amount: float
    date: datetime
    description: Optional[str] = None
    category: Optional[str] = None


class FinanceReport(CamelModel):
    total_income: float
    total_expenses: float
    balance: float
    transactions: list[TransactionRead]
