"""Email delivery for review and contact notifications."""

from __future__ import annotations

import hashlib
import logging
from email.message import EmailMessage
from html import escape

import aiosmtplib

from reviewguard.moderation.domain.notifier import ContactMessage, Notifier
from reviewguard.moderation.domain.reviews import ReviewRecord, UserDirectory
from reviewguard.settings import Settings

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()[:12]


class SmtpNotifier(Notifier):
    """Sends notifications to the recipient's directory address over SMTP.

    Recipients without an address on file are skipped with a log line. SMTP
    failures propagate; callers decide whether delivery is required.
    """

    def __init__(self, *, directory: UserDirectory, config: Settings) -> None:
        self._directory = directory
        self._config = config

    async def review_published(self, record: ReviewRecord) -> None:
        email = await self._recipient_email(record.recipient_id)
        if email is None:
            return
        link = f"{self._config.public_base_url.rstrip('/')}/recipients/{record.recipient_id}/reviews"
        title = escape(record.title or "")
        body = f"""
        <html>
            <body>
                <p>You received a new {record.rating}-star review.</p>
                <p><strong>{title}</strong></p>
                <p><a href="{link}">Read it here</a></p>
            </body>
        </html>
        """
        await self._send(email, "You have a new review", body)

    async def contact_message(self, contact: ContactMessage) -> None:
        email = await self._recipient_email(contact.recipient_id)
        if email is None:
            return
        phone = f"<p>Phone: {escape(contact.sender_phone)}</p>" if contact.sender_phone else ""
        body = f"""
        <html>
            <body>
                <p>{escape(contact.sender_name)} ({escape(contact.sender_email)}) sent you a message:</p>
                <p>{escape(contact.message)}</p>
                {phone}
            </body>
        </html>
        """
        await self._send(email, f"New message: {contact.subject}", body, reply_to=contact.sender_email)

    async def _recipient_email(self, recipient_id: str) -> str | None:
        user = await self._directory.get_user(recipient_id)
        if user is None or not user.email:
            logger.warning("notify_recipient_without_email", extra={"recipient_id": recipient_id})
            return None
        return user.email

    async def _send(self, to_email: str, subject: str, body_html: str, *, reply_to: str | None = None) -> None:
        msg = EmailMessage()
        msg["From"] = self._config.smtp_from_email
        msg["To"] = to_email
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.set_content(body_html, subtype="html")

        # STARTTLS on 587, implicit TLS on 465.
        start_tls = bool(self._config.smtp_tls) and int(self._config.smtp_port) == 587
        use_tls = bool(self._config.smtp_tls) and int(self._config.smtp_port) == 465
        await aiosmtplib.send(
            msg,
            hostname=self._config.smtp_host,
            port=self._config.smtp_port,
            username=self._config.smtp_user,
            password=self._config.smtp_password,
            start_tls=start_tls,
            use_tls=use_tls,
        )
        logger.info("Email sent to %s", mask_email(to_email))
