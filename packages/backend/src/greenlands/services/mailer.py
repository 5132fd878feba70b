"""Outbound mail for operator alerts.

smtplib is blocking, so sends run in a worker thread. Mail is an alert
channel only: a failed send is logged and never fails the request that
triggered it.
"""

import asyncio
import smtplib
from email.message import EmailMessage

import structlog

from greenlands.config import settings

logger = structlog.get_logger()


def _send(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(message)


async def send_mail(to: str, subject: str, body: str) -> bool:
    """Send a plain-text mail. Returns False when disabled or on failure."""
    if not settings.mail_enabled:
        logger.debug("mail.disabled", to=to, subject=subject)
        return False

    message = EmailMessage()
    message["From"] = settings.mail_from or settings.smtp_user
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    try:
        await asyncio.to_thread(_send, message)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("mail.send_failed", to=to, subject=subject, error=str(e))
        return False
    logger.info("mail.sent", to=to, subject=subject)
    return True
