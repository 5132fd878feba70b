"""Analytics service — the dashboard aggregation engine.

Every payload is recomputed from live queries on each request; nothing is
cached. Field names are part of the client contract: the dashboards
destructure them by name, so a renamed key silently renders as zero.

Grouped lists keep the {"_id": key, ...} shape the React charts read.
Empty tables produce zeros, empty dicts and empty lists, never errors.
"""

import calendar
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.policy import Role
from greenlands.db.models import LandParcel, User
from greenlands.errors import ValidationFailed

# Placeholders until historical scoring exists.
SUSTAINABILITY_SCORE = 92
MONTHLY_GROWTH = 12.5

TREND_MONTHS = 6
REPORT_TYPES = ("land_summary", "farmer_activity", "crop_performance")
DEFAULT_REPORT_START = datetime(2024, 1, 1, tzinfo=timezone.utc)

BEGINNER = "Beginner (0-5 years)"
INTERMEDIATE = "Intermediate (5-15 years)"
EXPERIENCED = "Experienced (15+ years)"


def _num(value) -> float:
    return float(value) if value is not None else 0


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _parse_date(value: Optional[str], default: datetime) -> datetime:
    if not value:
        return default
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailed(f"Invalid date: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AnalyticsService:
    """Summary statistics over users and land parcels."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Building blocks ────────────────────────────────

    def _active(self, role: Role):
        return (User.role == role.value, User.is_active.is_(True))

    async def _count_active(self, role: Role) -> int:
        result = await self.db.execute(
            select(func.count(User.id)).where(*self._active(role))
        )
        return int(result.scalar() or 0)

    async def _group_count(self, column, *where, order_by_key: bool = False) -> list[dict]:
        """[{_id, count}] for a column, count descending."""
        n = func.count().label("n")
        key = column.label("key")
        q = select(key, n).where(*where).group_by(key)
        q = q.order_by(key) if order_by_key else q.order_by(n.desc(), key)
        result = await self.db.execute(q)
        return [{"_id": row.key, "count": row.n} for row in result]

    @staticmethod
    def _counter_list(counter: Counter) -> list[dict]:
        return [
            {"_id": key, "count": count}
            for key, count in sorted(counter.items(), key=lambda kv: (-kv[1], str(kv[0])))
        ]

    async def _total_land_area(self) -> float:
        result = await self.db.execute(
            select(func.coalesce(func.sum(LandParcel.area), 0))
        )
        return _num(result.scalar())

    async def _declared_land_area(self) -> float:
        result = await self.db.execute(
            select(func.coalesce(func.sum(User.total_land_area), 0))
            .where(*self._active(Role.FARMER))
        )
        return _num(result.scalar())

    async def _list_column(self, column, role: Role) -> Counter:
        """Unwind a JSON list column over active users of a role."""
        result = await self.db.execute(select(column).where(*self._active(role)))
        counter: Counter = Counter()
        for values in result.scalars():
            counter.update(values or [])
        return counter

    async def _crop_groups(self) -> list:
        result = await self.db.execute(
            select(
                LandParcel.crop,
                func.count(LandParcel.id).label("n"),
                func.coalesce(func.sum(LandParcel.area), 0).label("total_area"),
            )
            .group_by(LandParcel.crop)
            .order_by(func.count(LandParcel.id).desc(), LandParcel.crop)
        )
        return list(result)

    async def _experience_buckets(self) -> list[dict]:
        bucket = case(
            (User.experience < 5, BEGINNER),
            (User.experience < 15, INTERMEDIATE),
            else_=EXPERIENCED,
        )
        return await self._group_count(
            bucket, *self._active(Role.FARMER), order_by_key=True
        )

    # ─── Overview ───────────────────────────────────────

    async def overview(self) -> dict:
        avg_yield = await self.db.execute(
            select(func.avg(LandParcel.actual_yield))
            .where(LandParcel.actual_yield.is_not(None))
        )

        crop_distribution: dict[str, int] = {}
        for row in await self._crop_groups():
            key = (row.crop or "").lower()
            crop_distribution[key] = crop_distribution.get(key, 0) + row.n

        farmers = func.count(User.id).label("farmers")
        regions = await self.db.execute(
            select(
                User.location,
                farmers,
                func.coalesce(func.sum(User.total_land_area), 0).label("land_area"),
            )
            .where(*self._active(Role.FARMER))
            .group_by(User.location)
            .order_by(farmers.desc(), User.location)
        )

        return {
            "totalLand": await self._total_land_area(),
            "activeFarmers": await self._count_active(Role.FARMER),
            "governmentPartners": await self._count_active(Role.GOVERNMENT),
            "averageYield": _num(avg_yield.scalar()),
            "sustainabilityScore": SUSTAINABILITY_SCORE,
            "monthlyGrowth": MONTHLY_GROWTH,
            "cropDistribution": crop_distribution,
            "regionalData": [
                {
                    "region": row.location,
                    "landArea": _num(row.land_area),
                    "farmers": row.farmers,
                }
                for row in regions
            ],
        }

    # ─── Land ───────────────────────────────────────────

    async def land_stats(self) -> dict:
        totals = (await self.db.execute(
            select(
                func.coalesce(func.sum(LandParcel.area), 0),
                func.count(LandParcel.id),
                func.avg(LandParcel.area),
            )
        )).one()

        total_area = func.coalesce(func.sum(LandParcel.area), 0).label("total_area")
        crops = await self.db.execute(
            select(
                LandParcel.crop,
                func.count(LandParcel.id).label("n"),
                total_area,
                func.avg(LandParcel.actual_yield).label("avg_yield"),
            )
            .group_by(LandParcel.crop)
            .order_by(total_area.desc(), LandParcel.crop)
        )

        return {
            "landStats": {
                "totalArea": _num(totals[0]),
                "totalLands": int(totals[1] or 0),
                "avgArea": _num(totals[2]),
            },
            "cropStats": [
                {
                    "_id": row.crop,
                    "count": row.n,
                    "totalArea": _num(row.total_area),
                    "avgYield": float(row.avg_yield) if row.avg_yield is not None else None,
                }
                for row in crops
            ],
            "statusStats": await self._group_count(LandParcel.status),
            "soilTypeStats": await self._group_count(LandParcel.soil_type),
        }

    async def land_summary(self) -> dict:
        """Compact land figures for the land-mapping page."""
        total_records = await self.db.execute(select(func.count(LandParcel.id)))
        return {
            "totalLandArea": await self._total_land_area(),
            "totalRecords": int(total_records.scalar() or 0),
            "cropDistribution": [
                {"_id": row.crop, "count": row.n, "totalArea": _num(row.total_area)}
                for row in await self._crop_groups()
            ],
            "statusDistribution": await self._group_count(LandParcel.status),
        }

    # ─── Farmers ────────────────────────────────────────

    async def farmer_summary(self) -> dict:
        return {
            "totalFarmers": await self._count_active(Role.FARMER),
            "farmersByLocation": await self._group_count(
                User.location, *self._active(Role.FARMER)
            ),
            "farmersByExperience": await self._experience_buckets(),
            "totalLandArea": await self._declared_land_area(),
        }

    async def farmer_stats(self) -> dict:
        stats = await self.farmer_summary()
        stats["cropPreferences"] = self._counter_list(
            await self._list_column(User.crops, Role.FARMER)
        )
        return stats

    # ─── Government ─────────────────────────────────────

    async def government_stats(self) -> dict:
        active = self._active(Role.GOVERNMENT)
        return {
            "totalOfficials": await self._count_active(Role.GOVERNMENT),
            "officialsByDepartment": await self._group_count(User.department, *active),
            "officialsByPosition": await self._group_count(User.position, *active),
            "permissionsSummary": self._counter_list(
                await self._list_column(User.permissions, Role.GOVERNMENT)
            ),
        }

    # ─── Trends ─────────────────────────────────────────

    async def trends(self, now: Optional[datetime] = None) -> dict:
        """Six monthly points ending with the current calendar month.

        Land and farmer growth are cumulative totals at each month's end;
        yield is the mean actual yield of parcels updated during the month.
        """
        now = now or datetime.now(timezone.utc)
        land_growth, farmer_growth, yield_trends, sustainability = [], [], [], []

        for offset in range(TREND_MONTHS - 1, -1, -1):
            year, month = _add_months(now.year, now.month, -offset)
            start = datetime(year, month, 1, tzinfo=timezone.utc)
            end = datetime(*_add_months(year, month, 1), 1, tzinfo=timezone.utc)
            label = calendar.month_abbr[month]

            land = await self.db.execute(
                select(func.coalesce(func.sum(LandParcel.area), 0))
                .where(LandParcel.created_at < end)
            )
            farmers = await self.db.execute(
                select(func.count(User.id))
                .where(*self._active(Role.FARMER), User.created_at < end)
            )
            avg_yield = await self.db.execute(
                select(func.avg(LandParcel.actual_yield))
                .where(
                    LandParcel.actual_yield.is_not(None),
                    LandParcel.last_updated >= start,
                    LandParcel.last_updated < end,
                )
            )

            land_growth.append({"month": label, "value": _num(land.scalar())})
            farmer_growth.append({"month": label, "value": int(farmers.scalar() or 0)})
            yield_trends.append({"month": label, "value": _num(avg_yield.scalar())})
            sustainability.append({"month": label, "value": SUSTAINABILITY_SCORE})

        return {
            "landGrowth": land_growth,
            "farmerGrowth": farmer_growth,
            "yieldTrends": yield_trends,
            "sustainabilityScore": sustainability,
        }

    # ─── Custom reports ─────────────────────────────────

    async def report(
        self,
        report_type: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        if report_type not in REPORT_TYPES:
            raise ValidationFailed("Invalid report type")

        generated_at = datetime.now(timezone.utc)
        start = _parse_date(start_date, DEFAULT_REPORT_START)
        end = _parse_date(end_date, generated_at)

        if report_type == "land_summary":
            data = await self._land_summary_report(start, end)
        elif report_type == "farmer_activity":
            data = await self._farmer_activity_report(start, end)
        else:
            data = await self._crop_performance_report(start, end)

        return {
            "type": report_type,
            "startDate": start_date,
            "endDate": end_date,
            "data": data,
            "generatedAt": generated_at.isoformat(),
        }

    async def _land_summary_report(self, start: datetime, end: datetime) -> list[dict]:
        row = (await self.db.execute(
            select(
                func.count(LandParcel.id),
                func.coalesce(func.sum(LandParcel.area), 0),
                func.avg(LandParcel.area),
            )
            .where(LandParcel.last_updated >= start, LandParcel.last_updated <= end)
        )).one()
        if not row[0]:
            return []
        return [{
            "_id": None,
            "totalLands": int(row[0]),
            "totalArea": _num(row[1]),
            "avgArea": _num(row[2]),
        }]

    async def _farmer_activity_report(self, start: datetime, end: datetime) -> list[dict]:
        farmers = func.count(User.id).label("farmers")
        result = await self.db.execute(
            select(
                User.location,
                farmers,
                func.coalesce(func.sum(User.total_land_area), 0).label("land_area"),
            )
            .where(
                *self._active(Role.FARMER),
                User.last_login >= start,
                User.last_login <= end,
            )
            .group_by(User.location)
            .order_by(farmers.desc(), User.location)
        )
        return [
            {"_id": row.location, "farmers": row.farmers, "totalLandArea": _num(row.land_area)}
            for row in result
        ]

    async def _crop_performance_report(self, start: datetime, end: datetime) -> list[dict]:
        total_area = func.coalesce(func.sum(LandParcel.area), 0).label("total_area")
        result = await self.db.execute(
            select(
                LandParcel.crop,
                func.count(LandParcel.id).label("n"),
                total_area,
                func.avg(LandParcel.actual_yield).label("avg_yield"),
                func.coalesce(func.sum(LandParcel.actual_yield), 0).label("total_yield"),
            )
            .where(LandParcel.last_updated >= start, LandParcel.last_updated <= end)
            .group_by(LandParcel.crop)
            .order_by(total_area.desc(), LandParcel.crop)
        )
        return [
            {
                "_id": row.crop,
                "count": row.n,
                "totalArea": _num(row.total_area),
                "avgYield": float(row.avg_yield) if row.avg_yield is not None else None,
                "totalYield": _num(row.total_yield),
            }
            for row in result
        ]
