"""Identity service — registration, login, profiles, farmers and officials.

Farmers and government officials are both rows in the users table; the
role decides which profile block is meaningful. Ownership checks happen
in the routes (ensure_can_mutate) before these methods run; this layer
only knows about records.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.jwt import create_access_token
from greenlands.auth.password import burn_verification, hash_password, verify_password
from greenlands.auth.policy import SELF_REGISTRATION_ROLES, Role
from greenlands.db.models import User, utcnow
from greenlands.errors import (
    DuplicateEmail,
    InvalidCredentials,
    NotFound,
    ValidationFailed,
)
from greenlands.events.store import EventStore
from greenlands.events.types import (
    PERMISSIONS_CHANGED,
    USER_ACTIVE_CHANGED,
    USER_PROFILE_UPDATED,
    USER_REGISTERED,
)


class IdentityService:
    """Business logic for users of every role."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    # ─── Accounts ───────────────────────────────────────

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalars().first()

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = Role.FARMER.value,
        phone: Optional[str] = None,
        location: Optional[str] = None,
        farm_details: Optional[dict] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> User:
        """Insert a user of any role. Callers decide which roles are allowed."""
        email = email.strip().lower()
        if await self.get_by_email(email):
            raise DuplicateEmail()

        farm = farm_details or {}
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=Role(role).value,
            phone=phone,
            location=location,
            total_land_area=farm.get("total_land_area", 0),
            crops=list(dict.fromkeys(farm.get("crops") or [])),
            equipment=list(dict.fromkeys(farm.get("equipment") or [])),
            experience=farm.get("experience", 0),
            department=department,
            position=position,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # A concurrent sign-up won the unique email index.
            await self.db.rollback()
            raise DuplicateEmail() from e

        await self.events.append(
            stream_id=f"user:{user.id}",
            event_type=USER_REGISTERED,
            data={"email": email, "role": user.role},
        )
        await self.db.commit()
        return user

    async def register(self, **profile) -> tuple[User, str]:
        """Self-service sign-up. Returns the new user and an access token."""
        role = profile.get("role") or Role.FARMER.value
        if Role(role) not in SELF_REGISTRATION_ROLES:
            raise ValidationFailed(f"Role '{role}' cannot be self-assigned")
        user = await self.create_user(**profile)
        return user, create_access_token(str(user.id), user.role)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials. Every failure mode gives the same error."""
        user = await self.get_by_email(email)
        if user is None:
            burn_verification(password)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash) or not user.is_active:
            raise InvalidCredentials()

        user.last_login = utcnow()
        await self.db.commit()
        return user, create_access_token(str(user.id), user.role)

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def update_profile(self, user_id: uuid.UUID, changes: dict) -> User:
        user = await self.get_user(user_id)
        for field in ("name", "phone", "location", "avatar", "preferences"):
            if changes.get(field) is not None:
                setattr(user, field, changes[field])

        await self.events.append(
            stream_id=f"user:{user.id}",
            event_type=USER_PROFILE_UPDATED,
            data={"fields": sorted(k for k, v in changes.items() if v is not None)},
            actor_id=str(user.id),
        )
        await self.db.commit()
        return user

    # ─── Farmers ────────────────────────────────────────

    async def list_farmers(self) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == Role.FARMER.value, User.is_active.is_(True))
            .order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_farmer(self, farmer_id: uuid.UUID, active_only: bool = True) -> User:
        user = await self.db.get(User, farmer_id)
        if (
            not user
            or user.role != Role.FARMER.value
            or (active_only and not user.is_active)
        ):
            raise NotFound("Farmer not found")
        return user

    async def farmers_by_location(self, location: str) -> list[User]:
        """Case-insensitive substring match on the farmer's location."""
        result = await self.db.execute(
            select(User)
            .where(
                User.role == Role.FARMER.value,
                User.is_active.is_(True),
                User.location.icontains(location, autoescape=True),
            )
            .order_by(User.name)
        )
        return list(result.scalars().all())

    async def update_farmer(
        self,
        farmer_id: uuid.UUID,
        name: str,
        phone: str,
        location: str,
        farm_details: Optional[dict] = None,
        actor_id: Optional[str] = None,
    ) -> User:
        farmer = await self.get_farmer(farmer_id, active_only=False)
        farmer.name = name
        farmer.phone = phone
        farmer.location = location
        if farm_details is not None:
            farmer.total_land_area = farm_details.get("total_land_area", 0)
            farmer.crops = list(dict.fromkeys(farm_details.get("crops") or []))
            farmer.equipment = list(dict.fromkeys(farm_details.get("equipment") or []))
            farmer.experience = farm_details.get("experience", 0)

        await self.events.append(
            stream_id=f"user:{farmer.id}",
            event_type=USER_PROFILE_UPDATED,
            data={"farm_details": farm_details is not None},
            actor_id=actor_id,
        )
        await self.db.commit()
        return farmer

    async def add_crop(self, farmer_id: uuid.UUID, crop: str) -> User:
        farmer = await self.get_farmer(farmer_id, active_only=False)
        if crop not in (farmer.crops or []):
            # Reassign so the JSON column is marked dirty.
            farmer.crops = [*(farmer.crops or []), crop]
            await self.db.commit()
        return farmer

    async def remove_crop(self, farmer_id: uuid.UUID, crop: str) -> User:
        farmer = await self.get_farmer(farmer_id, active_only=False)
        farmer.crops = [c for c in (farmer.crops or []) if c != crop]
        await self.db.commit()
        return farmer

    async def add_equipment(self, farmer_id: uuid.UUID, item: str) -> User:
        farmer = await self.get_farmer(farmer_id, active_only=False)
        if item not in (farmer.equipment or []):
            farmer.equipment = [*(farmer.equipment or []), item]
            await self.db.commit()
        return farmer

    async def remove_equipment(self, farmer_id: uuid.UUID, item: str) -> User:
        farmer = await self.get_farmer(farmer_id, active_only=False)
        farmer.equipment = [e for e in (farmer.equipment or []) if e != item]
        await self.db.commit()
        return farmer

    # ─── Government officials ───────────────────────────

    async def list_officials(self) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == Role.GOVERNMENT.value, User.is_active.is_(True))
            .order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_official(
        self, official_id: uuid.UUID, active_only: bool = True
    ) -> User:
        user = await self.db.get(User, official_id)
        if (
            not user
            or user.role != Role.GOVERNMENT.value
            or (active_only and not user.is_active)
        ):
            raise NotFound("Government official not found")
        return user

    async def officials_by_department(self, department: str) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(
                User.role == Role.GOVERNMENT.value,
                User.is_active.is_(True),
                User.department.icontains(department, autoescape=True),
            )
            .order_by(User.name)
        )
        return list(result.scalars().all())

    async def update_official(
        self,
        official_id: uuid.UUID,
        name: str,
        phone: str,
        department: str,
        position: str,
        permissions: Optional[list[str]] = None,
        actor_id: Optional[str] = None,
    ) -> User:
        official = await self.get_official(official_id, active_only=False)
        official.name = name
        official.phone = phone
        official.department = department
        official.position = position
        if permissions is not None:
            official.permissions = list(dict.fromkeys(permissions))

        await self.events.append(
            stream_id=f"user:{official.id}",
            event_type=USER_PROFILE_UPDATED,
            data={"permissions": official.permissions},
            actor_id=actor_id,
        )
        await self.db.commit()
        return official

    async def add_permission(
        self, official_id: uuid.UUID, permission: str, actor_id: Optional[str] = None
    ) -> User:
        official = await self.get_official(official_id, active_only=False)
        if permission not in (official.permissions or []):
            official.permissions = [*(official.permissions or []), permission]
            await self.events.append(
                stream_id=f"user:{official.id}",
                event_type=PERMISSIONS_CHANGED,
                data={"added": permission},
                actor_id=actor_id,
            )
            await self.db.commit()
        return official

    async def remove_permission(
        self, official_id: uuid.UUID, permission: str, actor_id: Optional[str] = None
    ) -> User:
        official = await self.get_official(official_id, active_only=False)
        if permission in (official.permissions or []):
            official.permissions = [p for p in official.permissions if p != permission]
            await self.events.append(
                stream_id=f"user:{official.id}",
                event_type=PERMISSIONS_CHANGED,
                data={"removed": permission},
                actor_id=actor_id,
            )
            await self.db.commit()
        return official

    # ─── Administration ─────────────────────────────────

    async def list_users(self, role: Optional[str] = None) -> list[User]:
        q = select(User).order_by(User.created_at.desc())
        if role:
            q = q.where(User.role == role)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def set_active(
        self, user_id: uuid.UUID, is_active: bool, actor_id: Optional[str] = None
    ) -> User:
        """Soft delete (is_active=False) or reactivate an account."""
        user = await self.get_user(user_id)
        if user.is_active != is_active:
            user.is_active = is_active
            await self.events.append(
                stream_id=f"user:{user.id}",
                event_type=USER_ACTIVE_CHANGED,
                data={"is_active": is_active},
                actor_id=actor_id,
            )
            await self.db.commit()
        return user

    async def contacts(self, user_id: uuid.UUID) -> list[User]:
        """Every other active user, for the message composer."""
        result = await self.db.execute(
            select(User)
            .where(User.is_active.is_(True), User.id != user_id)
            .order_by(User.name)
        )
        return list(result.scalars().all())
