"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Authentication is applied at the include_router level, so every route in
a protected router needs a valid bearer token before its own role checks
run. Health and auth are open; auth protects /me, /profile and /policy
itself.
"""

from fastapi import APIRouter, Depends

from greenlands.api.analytics import router as analytics_router
from greenlands.api.auth import router as auth_router
from greenlands.api.communication import router as communication_router
from greenlands.api.farmers import router as farmers_router
from greenlands.api.finance import router as finance_router
from greenlands.api.government import router as government_router
from greenlands.api.health import router as health_router
from greenlands.api.land import router as land_router
from greenlands.api.subsidies import router as subsidies_router
from greenlands.api.users import router as users_router
from greenlands.auth.dependencies import get_current_user

_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(land_router, tags=["land"], dependencies=_auth)
api_router.include_router(farmers_router, tags=["farmers"], dependencies=_auth)
api_router.include_router(government_router, tags=["government"], dependencies=_auth)
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(analytics_router, tags=["analytics"], dependencies=_auth)
api_router.include_router(communication_router, tags=["communication"], dependencies=_auth)
api_router.include_router(subsidies_router, tags=["subsidies"], dependencies=_auth)
api_router.include_router(finance_router, tags=["finance"], dependencies=_auth)
