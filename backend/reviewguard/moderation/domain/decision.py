"""Publish/hold decision for a review submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, Union

from reviewguard.moderation.domain import trust_flags
from reviewguard.moderation.domain.anomaly import AnomalyScorer
from reviewguard.moderation.domain.content_filter import ContentFilter
from reviewguard.moderation.domain.errors import ScoringError
from reviewguard.moderation.domain.rate_limit import RateLimiter
from reviewguard.moderation.domain.reviews import ReviewSubmission
from reviewguard.moderation.domain.trust_flags import TrustFlagSet

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SubmissionContext:
    """Author facts the engine scores against; gathered by the caller."""

    account_age_days: float
    rating_history: Sequence[int] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ModerationDecision:
    publish: bool
    flags: TrustFlagSet
    anomaly_score: float | None = None


@dataclass(frozen=True, slots=True)
class RateLimited:
    author_id: str


EvaluationResult = Union[ModerationDecision, RateLimited]


class ModerationDecisionEngine:
    """Rate limit first, then score content, rating, and account age.

    Structural and business preconditions (recipient eligibility, self review,
    duplicates) are the caller's job.
    """

    def __init__(
        self,
        *,
        rate_limiter: RateLimiter,
        content_filter: ContentFilter | None = None,
        anomaly_scorer: AnomalyScorer | None = None,
        new_account_days: float = trust_flags.NEW_ACCOUNT_DAYS,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._content_filter = content_filter or ContentFilter()
        self._anomaly = anomaly_scorer or AnomalyScorer()
        self._new_account_days = new_account_days

    async def evaluate(self, submission: ReviewSubmission, context: SubmissionContext) -> EvaluationResult:
        try:
            allowed = await self._rate_limiter.allow(submission.author_id)
        except Exception as exc:
            logger.exception("review_rate_limiter_failed", extra={"author_id": submission.author_id})
            raise ScoringError() from exc
        if not allowed:
            return RateLimited(author_id=submission.author_id)

        try:
            content = trust_flags.screen_submission(self._content_filter, submission)
            anomaly_score = self._anomaly.score(submission.rating, context.rating_history)
            suspicious = anomaly_score is not None and anomaly_score > self._anomaly.threshold
            flags = trust_flags.compute(
                submission,
                context.account_age_days,
                suspicious,
                content,
                new_account_days=self._new_account_days,
            )
        except Exception as exc:
            # Never fall back to either publish state on a scoring failure.
            logger.exception("review_scoring_failed", extra={"author_id": submission.author_id})
            raise ScoringError() from exc

        return ModerationDecision(
            publish=not flags.requires_moderation,
            flags=flags,
            anomaly_score=anomaly_score,
        )
