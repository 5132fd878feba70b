"""Subsidy service — programmes, applications and reviews."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.db.models import Subsidy, SubsidyApplication, User
from greenlands.errors import NotFound, ValidationFailed
from greenlands.events.store import EventStore
from greenlands.events.types import SUBSIDY_APPLIED, SUBSIDY_CREATED, SUBSIDY_REVIEWED

# (name, description, eligibility, days until the deadline)
DEFAULT_SUBSIDIES = (
    (
        "Organic Farming Support",
        "Financial support for farmers adopting organic practices.",
        "All registered farmers practicing organic farming.",
        30,
    ),
    (
        "Irrigation Equipment Grant",
        "Grant for purchasing modern irrigation equipment.",
        "Farmers with less than 10 acres of land.",
        60,
    ),
    (
        "Drought Relief Fund",
        "Relief fund for farmers affected by drought.",
        "Farmers in drought-declared regions.",
        15,
    ),
)


class SubsidyService:
    """Business logic for subsidies."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    async def list_subsidies(self) -> list[Subsidy]:
        result = await self.db.execute(
            select(Subsidy).order_by(Subsidy.application_deadline)
        )
        return list(result.scalars().all())

    async def create_subsidy(
        self,
        name: str,
        description: str,
        eligibility: str,
        application_deadline: datetime,
        actor_id: Optional[str] = None,
    ) -> Subsidy:
        subsidy = Subsidy(
            name=name,
            description=description,
            eligibility=eligibility,
            application_deadline=application_deadline,
        )
        self.db.add(subsidy)
        await self.db.flush()

        await self.events.append(
            stream_id=f"subsidy:{subsidy.id}",
            event_type=SUBSIDY_CREATED,
            data={"name": name},
            actor_id=actor_id,
        )
        await self.db.commit()
        return subsidy

    async def seed(self, replace: bool = True) -> list[Subsidy]:
        """Load the default programmes, deadlines relative to now."""
        if replace:
            await self.db.execute(delete(SubsidyApplication))
            await self.db.execute(delete(Subsidy))
        now = datetime.now(timezone.utc)
        subsidies = [
            Subsidy(
                name=name,
                description=description,
                eligibility=eligibility,
                application_deadline=now + timedelta(days=days),
            )
            for name, description, eligibility, days in DEFAULT_SUBSIDIES
        ]
        self.db.add_all(subsidies)
        await self.db.commit()
        return subsidies

    async def apply(
        self,
        farmer_id: uuid.UUID,
        subsidy_id: Optional[uuid.UUID],
        application_data: Optional[dict] = None,
    ) -> SubsidyApplication:
        """Both references are checked here; the schema does not enforce them."""
        if not subsidy_id:
            raise ValidationFailed("Subsidy ID is required")
        if not await self.db.get(Subsidy, subsidy_id):
            raise NotFound("Subsidy not found")
        if not await self.db.get(User, farmer_id):
            raise NotFound("Farmer not found")

        application = SubsidyApplication(
            subsidy_id=subsidy_id,
            farmer_id=farmer_id,
            application_data=application_data,
        )
        self.db.add(application)
        await self.db.flush()

        await self.events.append(
            stream_id=f"subsidy:{subsidy_id}",
            event_type=SUBSIDY_APPLIED,
            data={"application_id": str(application.id)},
            actor_id=str(farmer_id),
        )
        await self.db.commit()
        return application

    async def list_applications(
        self, farmer_id: Optional[uuid.UUID] = None
    ) -> list[SubsidyApplication]:
        """All applications, or one farmer's when farmer_id is given."""
        q = select(SubsidyApplication).order_by(SubsidyApplication.created_at.desc())
        if farmer_id:
            q = q.where(SubsidyApplication.farmer_id == farmer_id)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def review(
        self,
        application_id: uuid.UUID,
        status: str,
        reviewer_id: uuid.UUID,
        review_note: Optional[str] = None,
    ) -> SubsidyApplication:
        application = await self.db.get(SubsidyApplication, application_id)
        if not application:
            raise NotFound("Application not found")

        application.status = status
        application.reviewed_by = reviewer_id
        application.review_note = review_note

        await self.events.append(
            stream_id=f"subsidy:{application.subsidy_id}",
            event_type=SUBSIDY_REVIEWED,
            data={"application_id": str(application.id), "status": status},
            actor_id=str(reviewer_id),
        )
        await self.db.commit()
        return application
