import pytest

from reviewguard.moderation.domain.content_filter import ContentFilter
from reviewguard.moderation.domain.decision import (
    ModerationDecision,
    ModerationDecisionEngine,
    RateLimited,
    SubmissionContext,
)
from reviewguard.moderation.domain.errors import ScoringError
from reviewguard.moderation.domain.rate_limit import InMemoryRateLimiter
from reviewguard.moderation.domain.reviews import ReviewSubmission
from reviewguard.moderation.domain.trust_flags import TrustFlag


class CountingFilter(ContentFilter):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def check(self, text):
        self.calls += 1
        return super().check(text)


class BrokenLimiter:
    async def allow(self, key: str) -> bool:
        raise ConnectionError("redis unavailable")


def _submission(rating: int = 5, title: str = "Great work") -> ReviewSubmission:
    return ReviewSubmission(author_id="author", recipient_id="artist", rating=rating, title=title)


@pytest.mark.asyncio
async def test_new_author_first_rating_is_held() -> None:
    engine = ModerationDecisionEngine(rate_limiter=InMemoryRateLimiter())

    decision = await engine.evaluate(_submission(), SubmissionContext(account_age_days=0, rating_history=[]))

    assert isinstance(decision, ModerationDecision)
    assert decision.flags.names() == ("NEW_ACCOUNT",)
    assert decision.publish is False
    assert decision.anomaly_score is None


@pytest.mark.asyncio
async def test_consistent_established_author_is_published() -> None:
    engine = ModerationDecisionEngine(rate_limiter=InMemoryRateLimiter())

    decision = await engine.evaluate(_submission(rating=4), SubmissionContext(account_age_days=90, rating_history=[4, 5]))

    assert isinstance(decision, ModerationDecision)
    assert len(decision.flags) == 0
    assert decision.publish is True
    assert decision.anomaly_score == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_outlier_rating_is_held() -> None:
    engine = ModerationDecisionEngine(rate_limiter=InMemoryRateLimiter())

    decision = await engine.evaluate(_submission(rating=5), SubmissionContext(account_age_days=90, rating_history=[1, 1]))

    assert isinstance(decision, ModerationDecision)
    assert TrustFlag.SUSPICIOUS_RATING in decision.flags
    assert decision.publish is False


@pytest.mark.asyncio
async def test_rate_limited_submission_skips_scoring() -> None:
    content_filter = CountingFilter()
    engine = ModerationDecisionEngine(
        rate_limiter=InMemoryRateLimiter(max_per_window=1),
        content_filter=content_filter,
    )
    context = SubmissionContext(account_age_days=90, rating_history=[])

    await engine.evaluate(_submission(), context)
    calls_after_first = content_filter.calls
    result = await engine.evaluate(_submission(), context)

    assert result == RateLimited(author_id="author")
    assert content_filter.calls == calls_after_first


@pytest.mark.asyncio
async def test_limiter_failure_aborts_evaluation() -> None:
    engine = ModerationDecisionEngine(rate_limiter=BrokenLimiter())

    with pytest.raises(ScoringError):
        await engine.evaluate(_submission(), SubmissionContext(account_age_days=90))


@pytest.mark.asyncio
async def test_corrupt_history_aborts_evaluation() -> None:
    engine = ModerationDecisionEngine(rate_limiter=InMemoryRateLimiter())

    with pytest.raises(ScoringError) as exc:
        await engine.evaluate(_submission(), SubmissionContext(account_age_days=90, rating_history=[4, None]))
    assert exc.value.code == "internal_error"
    assert isinstance(exc.value.__cause__, TypeError)


@pytest.mark.asyncio
async def test_new_account_window_is_configurable() -> None:
    engine = ModerationDecisionEngine(rate_limiter=InMemoryRateLimiter(), new_account_days=7)

    decision = await engine.evaluate(_submission(), SubmissionContext(account_age_days=3))

    assert isinstance(decision, ModerationDecision)
    assert TrustFlag.NEW_ACCOUNT in decision.flags
