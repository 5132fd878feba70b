"""Pydantic schemas for identities: registration, login, profiles.

Separate input schemas (Register/Login/Update) from output schemas
(UserRead). The password hash never appears in any output schema.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from greenlands.schemas.base import CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

RoleName = Literal["farmer", "government", "admin", "analyst", "staff"]
Permission = Literal["read", "write", "admin", "approve", "report"]


# ─── Nested blocks ──────────────────────────────────────

class FarmDetails(CamelModel):
    total_land_area: float = Field(default=0, ge=0)
    crops: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0)


class FarmerRef(CamelModel):
    """Abbreviated user embedded in land records and tickets."""
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None


class UserSummary(CamelModel):
    """Contact-list entry."""
    id: uuid.UUID
    name: str
    role: str
    department: Optional[str] = None
    location: Optional[str] = None


# ─── Auth ───────────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6)
    role: RoleName = "farmer"
    phone: Optional[str] = None
    location: Optional[str] = None
    farm_details: Optional[FarmDetails] = None
    department: Optional[str] = None
    position: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    """Self-service profile edit; role and email are not editable."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None
    preferences: Optional[dict] = None


# ─── Output ─────────────────────────────────────────────

class UserRead(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    preferences: dict = Field(default_factory=dict)
    farm_details: FarmDetails
    department: Optional[str] = None
    position: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    token: str
    user: UserRead


class MeResponse(CamelModel):
    user: UserRead


class PolicyResponse(CamelModel):
    role: str
    views: dict[str, list[str]]
    allowed_views: list[str]
    api: dict[str, list[str]]


# ─── Farmers ────────────────────────────────────────────

class FarmerUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    farm_details: Optional[FarmDetails] = None


class CropAdd(CamelModel):
    crop: str = Field(..., min_length=1, max_length=100)

    @field_validator("crop")
    @classmethod
    def strip_crop(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Crop name is required")
        return v


class EquipmentAdd(CamelModel):
    equipment: str = Field(..., min_length=1, max_length=100)

    @field_validator("equipment")
    @classmethod
    def strip_equipment(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Equipment name is required")
        return v


# ─── Government ─────────────────────────────────────────

class OfficialUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    permissions: Optional[list[Permission]] = None


class PermissionAdd(CamelModel):
    permission: Permission


# ─── Admin ──────────────────────────────────────────────

class ActiveUpdate(CamelModel):
    is_active: bool
