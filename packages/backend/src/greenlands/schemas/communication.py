"""Schemas for messages, notifications, announcements and support tickets."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from greenlands.schemas.base import CamelModel
from greenlands.schemas.user import FarmerRef

MessagePriority = Literal["low", "normal", "high"]
AnnouncementType = Literal["info", "warning", "alert"]
AnnouncementPriority = Literal["low", "medium", "high"]


class Party(CamelModel):
    id: uuid.UUID
    name: str
    role: str


# ─── Messages ───────────────────────────────────────────

class MessageCreate(CamelModel):
    recipient_id: uuid.UUID
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    priority: MessagePriority = "normal"


class MessageRead(CamelModel):
    id: uuid.UUID
    sender: Party
    recipient: Party
    subject: str
    content: str
    timestamp: datetime = Field(validation_alias="created_at")
    read: bool
    priority: str


# ─── Notifications ──────────────────────────────────────

class NotificationRead(CamelModel):
    id: uuid.UUID
    type: str
    message: str
    related_id: Optional[uuid.UUID] = None
    read: bool
    created_at: datetime


class NotificationFeed(CamelModel):
    unread_count: int
    recent_messages: list[MessageRead]
    notifications: list[NotificationRead]


# ─── Announcements ──────────────────────────────────────

class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    type: AnnouncementType = "info"
    priority: AnnouncementPriority = "medium"
    expires_at: Optional[datetime] = None


class AnnouncementRead(CamelModel):
    id: uuid.UUID
    title: str
    content: str
    type: str
    priority: str
    author_id: Optional[uuid.UUID] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


# ─── Support ────────────────────────────────────────────

class SupportCreate(CamelModel):
    """Both fields are checked in the service so the error reads as one message."""
    subject: Optional[str] = None
    message: Optional[str] = None


class SupportUpdate(CamelModel):
    status: Optional[Literal["open", "closed"]] = None
    response: Optional[str] = None


class SupportRead(CamelModel):
    id: uuid.UUID
    user: FarmerRef
    subject: str
    message: str
    status: str
    response: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
