"""Review submission boundary: validation, scoring, persistence, notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from reviewguard.moderation.domain.decision import (
    ModerationDecisionEngine,
    RateLimited,
    SubmissionContext,
)
from reviewguard.moderation.domain.errors import (
    DuplicateReviewError,
    InvalidRecipientError,
    RateLimitError,
    SelfReviewError,
)
from reviewguard.moderation.domain.notifier import Notifier
from reviewguard.moderation.domain.reviews import (
    ReviewPage,
    ReviewRecord,
    ReviewStore,
    ReviewSubmission,
    UserDirectory,
    validate_submission,
)
from reviewguard.moderation.domain.trust_flags import TrustFlag
from reviewguard.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

DEFAULT_RECIPIENT_ROLES = ("ARTIST",)


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    record: ReviewRecord
    blocking_flags: tuple[TrustFlag, ...] = ()

    @property
    def published(self) -> bool:
        return self.record.is_approved


class ReviewLifecycleService:
    def __init__(
        self,
        *,
        store: ReviewStore,
        directory: UserDirectory,
        engine: ModerationDecisionEngine,
        notifier: Notifier,
        recipient_roles: Iterable[str] = DEFAULT_RECIPIENT_ROLES,
    ) -> None:
        self._store = store
        self._directory = directory
        self._engine = engine
        self._notifier = notifier
        self._recipient_roles = frozenset(role.upper() for role in recipient_roles)

    async def submit(self, submission: ReviewSubmission) -> SubmissionResult:
        submission = submission.normalized()
        validate_submission(submission)
        if submission.author_id == submission.recipient_id:
            obs_metrics.inc_review_submission("self_review")
            raise SelfReviewError()

        recipient = await self._directory.get_user(submission.recipient_id)
        if recipient is None:
            raise InvalidRecipientError("recipient_not_found")
        if recipient.role.upper() not in self._recipient_roles:
            raise InvalidRecipientError("recipient_not_eligible")
        if await self._store.find_by_pair(submission.author_id, submission.recipient_id) is not None:
            obs_metrics.inc_review_submission("duplicate")
            raise DuplicateReviewError()

        context = await self._context_for(submission.author_id)
        decision = await self._engine.evaluate(submission, context)
        if isinstance(decision, RateLimited):
            obs_metrics.inc_rate_limit_reject("review")
            obs_metrics.inc_review_submission("rate_limited")
            logger.info("review_rate_limited", extra={"author_id": submission.author_id})
            raise RateLimitError()

        record = ReviewRecord.from_submission(
            submission,
            is_approved=decision.publish,
            flags=decision.flags.names(),
        )
        record = await self._store.create(record)
        for flag in decision.flags:
            obs_metrics.inc_trust_flag(flag.value)
        obs_metrics.inc_review_submission("published" if decision.publish else "held")
        logger.info(
            "review_submitted",
            extra={
                "review_id": record.id,
                "author_id": record.author_id,
                "recipient_id": record.recipient_id,
                "published": decision.publish,
                "flags": list(decision.flags.names()),
            },
        )
        if decision.publish:
            await self._notify_published(record)
        return SubmissionResult(record=record, blocking_flags=decision.flags.blocking)

    async def list_public(
        self,
        *,
        recipient_id: str | None = None,
        rating: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ReviewPage:
        page = max(1, page)
        limit = max(1, min(limit, 50))
        items, total = await self._store.list_reviews(
            is_approved=True,
            is_hidden=False,
            recipient_id=recipient_id,
            rating=rating,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ReviewPage(items=items, total=total, page=page, limit=limit)

    async def _context_for(self, author_id: str) -> SubmissionContext:
        author = await self._directory.get_user(author_id)
        # An author unknown to the directory has no account age to vouch for them.
        age_days = author.account_age_days() if author is not None else 0.0
        history = await self._store.ratings_by_author(author_id)
        return SubmissionContext(account_age_days=age_days, rating_history=history)

    async def _notify_published(self, record: ReviewRecord) -> None:
        try:
            await self._notifier.review_published(record)
        except Exception:
            obs_metrics.inc_notify_failure("review_published")
            logger.warning("review_notify_failed", exc_info=True, extra={"review_id": record.id})
