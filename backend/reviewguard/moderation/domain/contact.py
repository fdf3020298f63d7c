"""Contact messages to listed recipients, screened by the hard content gate."""

from __future__ import annotations

import logging

from reviewguard.moderation.domain.content_filter import ContentFilter
from reviewguard.moderation.domain.errors import (
    ContactRateLimitError,
    ContentRejectedError,
    DeliveryError,
    DisposableEmailError,
    InvalidRecipientError,
)
from reviewguard.moderation.domain.notifier import ContactMessage, Notifier
from reviewguard.moderation.domain.rate_limit import RateLimiter
from reviewguard.moderation.domain.reviews import UserDirectory
from reviewguard.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class ContactScreeningService:
    """Any content issue rejects the message outright."""

    def __init__(
        self,
        *,
        directory: UserDirectory,
        notifier: Notifier,
        rate_limiter: RateLimiter,
        content_filter: ContentFilter | None = None,
    ) -> None:
        self._directory = directory
        self._notifier = notifier
        self._rate_limiter = rate_limiter
        self._filter = content_filter or ContentFilter()

    def screen(self, contact: ContactMessage) -> None:
        for field_name, value in (
            ("subject", contact.subject),
            ("message", contact.message),
            ("sender_name", contact.sender_name),
        ):
            verdict = self._filter.check(value)
            if not verdict.is_valid:
                obs_metrics.inc_contact_reject(field_name)
                raise ContentRejectedError(field_name, verdict.messages)
        if self._filter.is_disposable_email(contact.sender_email):
            obs_metrics.inc_contact_reject("disposable_email")
            raise DisposableEmailError()

    async def send(self, contact: ContactMessage) -> None:
        self.screen(contact)
        if not await self._rate_limiter.allow(contact.sender_email.lower()):
            obs_metrics.inc_rate_limit_reject("contact")
            raise ContactRateLimitError()
        if await self._directory.get_user(contact.recipient_id) is None:
            raise InvalidRecipientError("recipient_not_found")
        try:
            await self._notifier.contact_message(contact)
        except Exception as exc:
            obs_metrics.inc_notify_failure("contact_message")
            logger.error("contact_delivery_failed", exc_info=True, extra={"recipient_id": contact.recipient_id})
            raise DeliveryError() from exc
        logger.info("contact_message_sent", extra={"recipient_id": contact.recipient_id})
