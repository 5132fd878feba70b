"""Communication API routes: messages, notifications, announcements, support."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenlands.auth.dependencies import CurrentIdentity, require_roles
from greenlands.auth.policy import API_POLICY
from greenlands.db.engine import get_db
from greenlands.schemas.communication import (
    AnnouncementCreate,
    AnnouncementRead,
    MessageCreate,
    MessageRead,
    NotificationFeed,
    NotificationRead,
    SupportCreate,
    SupportRead,
    SupportUpdate,
)
from greenlands.schemas.user import UserSummary
from greenlands.services.communication_service import CommunicationService
from greenlands.services.identity_service import IdentityService

router = APIRouter(prefix="/communication")

_messages = require_roles(API_POLICY["messages"])


def _svc(db: AsyncSession = Depends(get_db)) -> CommunicationService:
    return CommunicationService(db)


# ─── Messages ───────────────────────────────────────────

@router.get("/messages", response_model=list[MessageRead])
async def list_messages(
    identity: CurrentIdentity = Depends(_messages),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.list_messages(identity.uuid)


@router.post("/messages", response_model=MessageRead, status_code=201)
async def send_message(
    body: MessageCreate,
    identity: CurrentIdentity = Depends(_messages),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.send_message(
        sender_id=identity.uuid,
        recipient_id=body.recipient_id,
        subject=body.subject,
        content=body.content,
        priority=body.priority,
    )


@router.get("/messages/{message_id}", response_model=MessageRead)
async def get_message(
    message_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_messages),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.get_message(message_id, identity)


@router.put("/messages/{message_id}/read", response_model=MessageRead)
async def mark_message_read(
    message_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_messages),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.mark_message_read(message_id, identity)


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_messages),
    svc: CommunicationService = Depends(_svc),
):
    await svc.delete_message(message_id, identity)
    return {"message": "Message deleted successfully"}


@router.get("/contacts", response_model=list[UserSummary])
async def contacts(
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["contacts"])),
    db: AsyncSession = Depends(get_db),
):
    return await IdentityService(db).contacts(identity.uuid)


# ─── Notifications ──────────────────────────────────────

_notifications = require_roles(API_POLICY["notifications"])


@router.get("/notifications", response_model=NotificationFeed)
async def notifications(
    identity: CurrentIdentity = Depends(_notifications),
    svc: CommunicationService = Depends(_svc),
):
    """Unread message count, recent messages and unread notifications."""
    return await svc.notifications(identity)


@router.put("/notifications/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: uuid.UUID,
    identity: CurrentIdentity = Depends(_notifications),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.mark_notification_read(notification_id, identity)


# ─── Announcements ──────────────────────────────────────

@router.get("/announcements", response_model=list[AnnouncementRead])
async def list_announcements(
    _: CurrentIdentity = Depends(require_roles(API_POLICY["announcements.read"])),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.list_announcements()


@router.post("/announcements", response_model=AnnouncementRead, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["announcements.write"])),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.create_announcement(identity.uuid, **body.model_dump())


# ─── Support ────────────────────────────────────────────

_support_manage = require_roles(API_POLICY["support.manage"])


@router.post("/support")
async def create_support_request(
    body: SupportCreate,
    identity: CurrentIdentity = Depends(require_roles(API_POLICY["support.create"])),
    svc: CommunicationService = Depends(_svc),
):
    await svc.create_support_request(identity, body.subject, body.message)
    return {"success": True}


@router.get("/support", response_model=list[SupportRead])
async def list_support_requests(
    _: CurrentIdentity = Depends(_support_manage),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.list_support_requests()


@router.put("/support/{ticket_id}", response_model=SupportRead)
async def update_support_request(
    ticket_id: uuid.UUID,
    body: SupportUpdate,
    identity: CurrentIdentity = Depends(_support_manage),
    svc: CommunicationService = Depends(_svc),
):
    return await svc.update_support_request(
        ticket_id, status=body.status, response=body.response, actor_id=identity.user_id
    )
