"""Health check endpoint.

Reports the database (required) and Redis (optional) connectivity.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from greenlands import __version__
from greenlands.db.engine import engine

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    try:
        from greenlands.realtime.pubsub import get_redis

        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"unavailable: {e}"

    return {
        "status": "OK" if checks["database"] == "ok" else "DEGRADED",
        "message": "GreenLands API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        **checks,
    }
