"""Land service — parcel CRUD and the per-farmer CSV report."""

import csv
import io
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from greenlands.db.models import LandParcel, User, utcnow
from greenlands.errors import NotFound
from greenlands.events.store import EventStore
from greenlands.events.types import LAND_CREATED, LAND_DELETED, LAND_UPDATED

REPORT_COLUMNS = (
    "Farmer", "Email", "LandName", "Area", "Crop", "SoilType", "Status", "LastUpdated",
)


class LandService:
    """Business logic for land parcels."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    def _query(self):
        return select(LandParcel).options(selectinload(LandParcel.farmer))

    async def list_lands(self, farmer_id: Optional[uuid.UUID] = None) -> list[LandParcel]:
        q = self._query().order_by(LandParcel.last_updated.desc())
        if farmer_id:
            q = q.where(LandParcel.farmer_id == farmer_id)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get_land(self, land_id: uuid.UUID) -> LandParcel:
        result = await self.db.execute(
            self._query()
            .where(LandParcel.id == land_id)
            .execution_options(populate_existing=True)
        )
        land = result.scalars().first()
        if not land:
            raise NotFound("Land record not found")
        return land

    async def create_land(self, farmer_id: uuid.UUID, data: dict) -> LandParcel:
        lat, lon = data.pop("coordinates")
        land = LandParcel(
            farmer_id=farmer_id,
            latitude=lat,
            longitude=lon,
            last_updated=utcnow(),
            **{k: v for k, v in data.items() if v is not None},
        )
        self.db.add(land)
        await self.db.flush()

        await self.events.append(
            stream_id=f"land:{land.id}",
            event_type=LAND_CREATED,
            data={"name": land.name, "area": land.area, "crop": land.crop},
            actor_id=str(farmer_id),
        )
        await self.db.commit()
        return await self.get_land(land.id)

    async def update_land(
        self, land: LandParcel, data: dict, actor_id: Optional[str] = None
    ) -> LandParcel:
        """Core fields are replaced; status, coordinates and extras only when given."""
        coordinates = data.pop("coordinates", None)
        if coordinates is not None:
            land.latitude, land.longitude = coordinates
        for field, value in data.items():
            if value is not None:
                setattr(land, field, value)
        land.last_updated = utcnow()

        await self.events.append(
            stream_id=f"land:{land.id}",
            event_type=LAND_UPDATED,
            data={"fields": sorted(k for k, v in data.items() if v is not None)},
            actor_id=actor_id,
        )
        await self.db.commit()
        return await self.get_land(land.id)

    async def delete_land(self, land: LandParcel, actor_id: Optional[str] = None) -> None:
        await self.events.append(
            stream_id=f"land:{land.id}",
            event_type=LAND_DELETED,
            data={"name": land.name, "farmer_id": str(land.farmer_id)},
            actor_id=actor_id,
        )
        await self.db.delete(land)
        await self.db.commit()

    async def farmer_report(self, farmer_id: uuid.UUID) -> tuple[str, str]:
        """CSV of a farmer's parcels. Returns (filename, csv_text)."""
        farmer = await self.db.get(User, farmer_id)
        if not farmer:
            raise NotFound("Farmer not found")
        result = await self.db.execute(
            select(LandParcel)
            .where(LandParcel.farmer_id == farmer_id)
            .order_by(LandParcel.last_updated.desc())
        )

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(REPORT_COLUMNS)
        for land in result.scalars().all():
            writer.writerow([
                farmer.name,
                farmer.email,
                land.name,
                land.area,
                land.crop,
                land.soil_type,
                land.status,
                land.last_updated.isoformat() if land.last_updated else "",
            ])

        filename = "farmer_report_{}.csv".format("_".join(farmer.name.split()))
        return filename, buf.getvalue()
