"""Finance service — the farmer-scoped ledger and its report."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.db.models import Transaction, utcnow


class FinanceService:
    """Business logic for a farmer's income and expenses."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        farmer_id: uuid.UUID,
        type: str,
        amount: float,
        date: Optional[datetime] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Transaction:
        txn = Transaction(
            farmer_id=farmer_id,
            type=type,
            amount=amount,
            date=date or utcnow(),
            description=description,
            category=category,
        )
        self.db.add(txn)
        await self.db.commit()
        return txn

    async def report(self, farmer_id: uuid.UUID) -> dict:
        """Totals over every transaction of one farmer, newest first.

        balance is always total_income - total_expenses; an empty ledger
        reports zeros.
        """
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.farmer_id == farmer_id)
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        transactions = list(result.scalars().all())

        total_income = sum(t.amount for t in transactions if t.type == "income")
        total_expenses = sum(t.amount for t in transactions if t.type == "expense")
        return {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "balance": total_income - total_expenses,
            "transactions": transactions,
        }
