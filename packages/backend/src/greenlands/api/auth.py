"""Auth API — registration, login, the caller's profile and role policy.

- POST /auth/register → create an account, returns {token, user}
- POST /auth/login → email/password → {token, user}
- GET /auth/me → {user}
- PUT /auth/profile → edit own name/phone/location/avatar/preferences
- GET /auth/policy → role tables the client route guard renders from
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, get_current_user
from greenlands.auth.guard import allowed_views
from greenlands.auth.policy import API_POLICY, VIEW_POLICY, serialize_policy
from greenlands.db.engine import get_db
from greenlands.schemas.user import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    PolicyResponse,
    ProfileUpdate,
    RegisterRequest,
)
from greenlands.services.identity_service import IdentityService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: IdentityService = Depends(_svc)):
    """Create a new account and sign it in."""
    profile = body.model_dump(exclude_none=True)
    user, token = await svc.register(**profile)
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: IdentityService = Depends(_svc)):
    user, token = await svc.login(body.email, body.password)
    return {"token": token, "user": user}


@router.get("/me", response_model=MeResponse)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IdentityService = Depends(_svc),
):
    return {"user": await svc.get_user(identity.uuid)}


@router.put("/profile", response_model=MeResponse)
async def update_profile(
    body: ProfileUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: IdentityService = Depends(_svc),
):
    user = await svc.update_profile(identity.uuid, body.model_dump(exclude_none=True))
    return {"user": user}


@router.get("/policy", response_model=PolicyResponse)
async def get_policy(identity: CurrentIdentity = Depends(get_current_user)):
    """The view and API role tables, plus the views this caller may open."""
    return {
        "role": identity.role,
        "views": serialize_policy(VIEW_POLICY),
        "allowed_views": allowed_views(identity.role),
        "api": serialize_policy(API_POLICY),
    }
