"""Communication service — messages, notifications, announcements, support.

A new support ticket fans out three ways: a broadcast Notification row
(user_id=None, read by every admin and staff member), a support:new event
on the Redis support channel for connected dashboards, and a mail to the
operator address. Only the database writes are transactional; the other
two are best-effort.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from greenlands.auth.dependencies import CurrentIdentity
from greenlands.auth.policy import API_POLICY
from greenlands.config import settings
from greenlands.db.models import Announcement, Message, Notification, SupportRequest, User
from greenlands.errors import Forbidden, NotFound, ValidationFailed
from greenlands.events.store import EventStore
from greenlands.events.types import (
    ANNOUNCEMENT_CREATED,
    SUPPORT_CREATED,
    SUPPORT_NEW,
    SUPPORT_UPDATED,
)
from greenlands.realtime.pubsub import SUPPORT_AUDIENCE, publish_event
from greenlands.services.mailer import send_mail

logger = structlog.get_logger()

RECENT_MESSAGES = 5


class CommunicationService:
    """Business logic for user-to-user and operator communication."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.events = EventStore(db)

    # ─── Messages ───────────────────────────────────────

    def _messages(self):
        return select(Message).options(
            selectinload(Message.sender), selectinload(Message.recipient)
        )

    async def list_messages(
        self, user_id: uuid.UUID, limit: Optional[int] = None
    ) -> list[Message]:
        """Messages sent or received by the user, newest first."""
        q = (
            self._messages()
            .where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
            .order_by(Message.created_at.desc())
        )
        if limit:
            q = q.limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def _load_message(self, message_id: uuid.UUID) -> Message:
        result = await self.db.execute(
            self._messages()
            .where(Message.id == message_id)
            .execution_options(populate_existing=True)
        )
        message = result.scalars().first()
        if not message:
            raise NotFound("Message not found")
        return message

    async def get_message(self, message_id: uuid.UUID, identity: CurrentIdentity) -> Message:
        """Fetch a message the caller is party to; the recipient's view marks it read."""
        message = await self._load_message(message_id)
        if identity.uuid not in (message.sender_id, message.recipient_id):
            raise Forbidden("Not authorized")
        if message.recipient_id == identity.uuid and not message.read:
            message.read = True
            await self.db.commit()
        return message

    async def send_message(
        self,
        sender_id: uuid.UUID,
        recipient_id: uuid.UUID,
        subject: str,
        content: str,
        priority: str = "normal",
    ) -> Message:
        recipient = await self.db.get(User, recipient_id)
        if not recipient or not recipient.is_active:
            raise NotFound("Recipient not found")

        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            subject=subject,
            content=content,
            priority=priority,
        )
        self.db.add(message)
        await self.db.commit()
        return await self._load_message(message.id)

    async def mark_message_read(
        self, message_id: uuid.UUID, identity: CurrentIdentity
    ) -> Message:
        message = await self._load_message(message_id)
        if message.recipient_id != identity.uuid:
            raise Forbidden("Not authorized")
        message.read = True
        await self.db.commit()
        return message

    async def delete_message(self, message_id: uuid.UUID, identity: CurrentIdentity) -> None:
        message = await self._load_message(message_id)
        if identity.uuid not in (message.sender_id, message.recipient_id):
            raise Forbidden("Not authorized")
        await self.db.delete(message)
        await self.db.commit()

    # ─── Notifications ──────────────────────────────────

    def _visible_notifications(self, identity: CurrentIdentity):
        """Targeted notifications, plus broadcasts for support operators."""
        if identity.has_role(*API_POLICY["support.manage"]):
            return or_(Notification.user_id == identity.uuid, Notification.user_id.is_(None))
        return Notification.user_id == identity.uuid

    async def notifications(self, identity: CurrentIdentity) -> dict:
        unread = await self.db.execute(
            select(func.count(Message.id))
            .where(Message.recipient_id == identity.uuid, Message.read.is_(False))
        )
        result = await self.db.execute(
            select(Notification)
            .where(self._visible_notifications(identity), Notification.read.is_(False))
            .order_by(Notification.created_at.desc())
        )
        return {
            "unread_count": int(unread.scalar() or 0),
            "recent_messages": await self.list_messages(identity.uuid, limit=RECENT_MESSAGES),
            "notifications": list(result.scalars().all()),
        }

    async def mark_notification_read(
        self, notification_id: uuid.UUID, identity: CurrentIdentity
    ) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                self._visible_notifications(identity),
            )
        )
        notification = result.scalars().first()
        if not notification:
            raise NotFound("Notification not found")
        notification.read = True
        await self.db.commit()
        return notification

    # ─── Announcements ──────────────────────────────────

    async def list_announcements(self) -> list[Announcement]:
        """Announcements that have not expired, newest first."""
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(Announcement)
            .where(or_(Announcement.expires_at.is_(None), Announcement.expires_at > now))
            .order_by(Announcement.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_announcement(self, author_id: uuid.UUID, **fields) -> Announcement:
        announcement = Announcement(author_id=author_id, **fields)
        self.db.add(announcement)
        await self.db.flush()

        await self.events.append(
            stream_id=f"announcement:{announcement.id}",
            event_type=ANNOUNCEMENT_CREATED,
            data={"title": announcement.title, "type": announcement.type},
            actor_id=str(author_id),
        )
        await self.db.commit()
        return announcement

    # ─── Support ────────────────────────────────────────

    async def create_support_request(
        self,
        identity: CurrentIdentity,
        subject: Optional[str],
        message: Optional[str],
    ) -> SupportRequest:
        if not (subject and subject.strip()) or not (message and message.strip()):
            raise ValidationFailed("Subject and message are required")

        ticket = SupportRequest(user_id=identity.uuid, subject=subject, message=message)
        self.db.add(ticket)
        await self.db.flush()

        self.db.add(Notification(
            type="support",
            message=f"New support request from {identity.user_id}",
            user_id=None,
            related_id=ticket.id,
        ))
        await self.events.append(
            stream_id=f"support:{ticket.id}",
            event_type=SUPPORT_CREATED,
            data={"subject": subject},
            actor_id=identity.user_id,
        )
        await self.db.commit()
        logger.info("support.created", ticket_id=str(ticket.id), user_id=identity.user_id)

        await publish_event(SUPPORT_AUDIENCE, SUPPORT_NEW, {
            "id": str(ticket.id),
            "subject": ticket.subject,
            "user": identity.user_id,
            "createdAt": ticket.created_at.isoformat(),
        })
        sent = await send_mail(
            settings.admin_email,
            f"New Support Request: {subject}",
            f"User: {identity.user_id}\nSubject: {subject}\nMessage: {message}",
        )
        if settings.mail_enabled and not sent:
            logger.warning("support.alert_failed", ticket_id=str(ticket.id))
        return ticket

    async def list_support_requests(self) -> list[SupportRequest]:
        result = await self.db.execute(
            select(SupportRequest)
            .options(selectinload(SupportRequest.user))
            .order_by(SupportRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_support_request(
        self,
        ticket_id: uuid.UUID,
        status: Optional[str] = None,
        response: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> SupportRequest:
        result = await self.db.execute(
            select(SupportRequest)
            .options(selectinload(SupportRequest.user))
            .where(SupportRequest.id == ticket_id)
        )
        ticket = result.scalars().first()
        if not ticket:
            raise NotFound("Support request not found")

        if status:
            ticket.status = status
        if response:
            ticket.response = response
        await self.events.append(
            stream_id=f"support:{ticket.id}",
            event_type=SUPPORT_UPDATED,
            data={"status": ticket.status, "responded": bool(response)},
            actor_id=actor_id,
        )
        await self.db.commit()
        return ticket
