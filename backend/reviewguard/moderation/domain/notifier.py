"""Outbound notification contract and the in-process implementations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from reviewguard.moderation.domain.reviews import ReviewRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ContactMessage:
    recipient_id: str
    subject: str
    message: str
    sender_name: str
    sender_email: str
    sender_phone: str | None = None


class Notifier(Protocol):
    async def review_published(self, record: ReviewRecord) -> None:
        ...

    async def contact_message(self, contact: ContactMessage) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes notifications to the log; the default outside production."""

    async def review_published(self, record: ReviewRecord) -> None:
        logger.info(
            "notify_review_published",
            extra={"review_id": record.id, "recipient_id": record.recipient_id, "rating": record.rating},
        )

    async def contact_message(self, contact: ContactMessage) -> None:
        logger.info("notify_contact_message", extra={"recipient_id": contact.recipient_id})

