"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing these
models to the actual DB.

Column types are dialect-neutral (Uuid, JSON) so the same models run on
PostgreSQL in production and SQLite in the test-suite.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


ACRES_TO_HECTARES = 0.404686


# ══════════════════════════════════════════════════════════════
# Identity
# ══════════════════════════════════════════════════════════════


class User(Base):
    """An identity: farmer, government official, analyst, staff or admin.

    Farm details and government fields live on the same row; which ones
    are meaningful depends on the role. Users are never hard-deleted —
    is_active=False is the soft delete.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_role_active", "role", "is_active"),
        Index("idx_users_location", "location"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="farmer"
    )  # farmer, government, admin, analyst, staff
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    preferences: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Farmers
    total_land_area: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    crops: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    equipment: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Government officials
    department: Mapped[Optional[str]] = mapped_column(String(255))
    position: Mapped[Optional[str]] = mapped_column(String(255))
    permissions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    land_parcels: Mapped[list["LandParcel"]] = relationship(back_populates="farmer")

    @property
    def farm_details(self) -> dict:
        return {
            "total_land_area": self.total_land_area or 0,
            "crops": list(self.crops or []),
            "equipment": list(self.equipment or []),
            "experience": self.experience or 0,
        }


# ══════════════════════════════════════════════════════════════
# Land
# ══════════════════════════════════════════════════════════════


class LandParcel(Base):
    """A parcel of land owned by exactly one farmer.

    Coordinates are stored as two columns and exposed as a [lat, lon] pair.
    Area is in acres.
    """

    __tablename__ = "land_parcels"
    __table_args__ = (
        Index("idx_land_farmer", "farmer_id"),
        Index("idx_land_crop", "crop"),
        Index("idx_land_status", "status"),
        Index("idx_land_last_updated", "last_updated"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    area: Mapped[float] = mapped_column(Float, nullable=False)
    crop: Mapped[str] = mapped_column(String(100), nullable=False)
    soil_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Active")
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    description: Mapped[Optional[str]] = mapped_column(Text)
    irrigation_type: Mapped[Optional[str]] = mapped_column(String(20))
    fertilizer_used: Mapped[Optional[str]] = mapped_column(String(255))
    pesticide_used: Mapped[Optional[str]] = mapped_column(String(255))
    expected_yield: Mapped[Optional[float]] = mapped_column(Float)
    actual_yield: Mapped[Optional[float]] = mapped_column(Float)
    planting_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    harvest_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Environmental data
    soil_ph: Mapped[Optional[float]] = mapped_column(Float)
    soil_moisture: Mapped[Optional[float]] = mapped_column(Float)
    temperature: Mapped[Optional[float]] = mapped_column(Float)
    rainfall: Mapped[Optional[float]] = mapped_column(Float)

    # Financial data
    investment: Mapped[Optional[float]] = mapped_column(Float)
    revenue: Mapped[Optional[float]] = mapped_column(Float)

    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    farmer: Mapped["User"] = relationship(back_populates="land_parcels")

    @property
    def coordinates(self) -> list[float]:
        return [self.latitude, self.longitude]

    @property
    def area_in_hectares(self) -> float:
        return self.area * ACRES_TO_HECTARES

    @property
    def yield_per_acre(self) -> Optional[float]:
        if self.actual_yield and self.area:
            return self.actual_yield / self.area
        return None

    @property
    def profit(self) -> Optional[float]:
        if self.revenue and self.investment:
            return self.revenue - self.investment
        return None


# ══════════════════════════════════════════════════════════════
# Subsidies
# ══════════════════════════════════════════════════════════════


class Subsidy(Base):
    __tablename__ = "subsidies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    eligibility: Mapped[str] = mapped_column(Text, nullable=False)
    application_deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class SubsidyApplication(Base):
    """A farmer's application for a subsidy.

    References are validated when the application is created; status moves
    pending → approved | rejected through a government/admin review.
    """

    __tablename__ = "subsidy_applications"
    __table_args__ = (
        Index("idx_subsidy_applications_farmer", "farmer_id"),
        Index("idx_subsidy_applications_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    subsidy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("subsidies.id"), nullable=False
    )
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    application_data: Mapped[Optional[dict]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, approved, rejected
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id")
    )
    review_note: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    subsidy: Mapped["Subsidy"] = relationship()


# ══════════════════════════════════════════════════════════════
# Communication
# ══════════════════════════════════════════════════════════════


class SupportRequest(Base):
    __tablename__ = "support_requests"
    __table_args__ = (Index("idx_support_requests_status", "status"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="open"
    )  # open, closed
    response: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    user: Mapped["User"] = relationship()


class Notification(Base):
    """A notification flag. user_id=None means "every admin and staff member"."""

    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_user_read", "user_id", "read"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id")
    )
    related_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class Message(Base):
    """Direct message between two users."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_recipient_read", "recipient_id", "read"),
        Index("idx_messages_sender", "sender_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="normal")
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    sender: Mapped["User"] = relationship(foreign_keys=[sender_id])
    recipient: Mapped["User"] = relationship(foreign_keys=[recipient_id])


class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id")
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Finance
# ══════════════════════════════════════════════════════════════


class Transaction(Base):
    """Farmer-scoped ledger entry."""

    __tablename__ = "transactions"
    __table_args__ = (Index("idx_transactions_farmer_date", "farmer_id", "date"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # income, expense
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Audit log
# ══════════════════════════════════════════════════════════════


class Event(Base):
    """Append-only audit log of domain changes.

    stream_id examples: "user:<uuid>", "land:<uuid>", "support:<uuid>"
    type examples: "land.created", "support.created"
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_stream", "stream_id", "id"),
        Index("idx_events_type", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stream_id: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    meta: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )  # actor_id
    # Python attr is "meta" because "metadata" is reserved by SQLAlchemy.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
