"""Audit trail for GreenLands mutations.

Services write one row per change (``land.created``, ``user.deactivated``,
``subsidy.application_reviewed`` ...) through the caller's session, so an
audit row is committed together with the change it describes and vanishes
with it on rollback. Streams are keyed ``<kind>:<id>``, e.g. ``land:<uuid>``.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.db.models import Event


class EventStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        stream_id: str,
        event_type: str,
        data: dict,
        actor_id: str | None = None,
    ) -> Event:
        """Record ``event_type`` on ``stream_id``; the row id is assigned on flush."""
        meta = {"actor_id": actor_id} if actor_id else {}
        event = Event(stream_id=stream_id, type=event_type, data=data, meta=meta)
        self.db.add(event)
        await self.db.flush()
        return event

    async def read_stream(
        self,
        stream_id: str,
        after_id: int = 0,
        limit: int = 100,
    ) -> list[Event]:
        """Oldest-first history of one entity, resuming after ``after_id``."""
        query = (
            select(Event)
            .where(Event.stream_id == stream_id)
            .where(Event.id > after_id)
            .order_by(Event.id.asc())
            .limit(limit)
        )
        rows = await self.db.scalars(query)
        return list(rows)
