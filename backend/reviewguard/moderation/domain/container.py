"""Lightweight service container shared by the review workflow modules."""

from __future__ import annotations

from typing import Optional, Sequence

import asyncpg
from redis.asyncio import Redis

from reviewguard.infra.redis import RedisProxy
from reviewguard.moderation.domain.admin import (
    AuditRepository,
    InMemoryAuditRepository,
    ModerationAdminService,
)
from reviewguard.moderation.domain.anomaly import AnomalyScorer
from reviewguard.moderation.domain.contact import ContactScreeningService
from reviewguard.moderation.domain.content_filter import ContentFilter
from reviewguard.moderation.domain.decision import ModerationDecisionEngine
from reviewguard.moderation.domain.lifecycle import ReviewLifecycleService
from reviewguard.moderation.domain.notifier import LoggingNotifier, Notifier
from reviewguard.moderation.domain.rate_limit import InMemoryRateLimiter, RateLimiter, RedisRateLimiter
from reviewguard.moderation.domain.reviews import (
    InMemoryReviewStore,
    InMemoryUserDirectory,
    ReviewStore,
    UserDirectory,
)
from reviewguard.settings import Settings, settings

_store: ReviewStore = InMemoryReviewStore()
_directory: UserDirectory = InMemoryUserDirectory()
_audit: AuditRepository = InMemoryAuditRepository()
_notifier: Notifier = LoggingNotifier()
_content_filter = ContentFilter()


def _memory_review_limiter(config: Settings) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(
        max_per_window=config.review_rate_limit_max,
        window_seconds=config.review_rate_limit_window_seconds,
        max_tracked_keys=config.rate_limit_max_tracked_authors,
    )


def _memory_contact_limiter(config: Settings) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(
        max_per_window=config.contact_rate_limit_max,
        window_seconds=config.contact_rate_limit_window_seconds,
        max_tracked_keys=config.rate_limit_max_tracked_authors,
    )


_review_limiter: RateLimiter = _memory_review_limiter(settings)
_contact_limiter: RateLimiter = _memory_contact_limiter(settings)
_anomaly = AnomalyScorer(threshold=settings.anomaly_threshold)
_new_account_days: float = settings.new_account_days
_recipient_roles: tuple[str, ...] = tuple(settings.review_recipient_roles)

_lifecycle_service: ReviewLifecycleService | None = None
_admin_service: ModerationAdminService | None = None
_contact_service: ContactScreeningService | None = None


def _rebuild_services() -> None:
    global _lifecycle_service, _admin_service, _contact_service
    engine = ModerationDecisionEngine(
        rate_limiter=_review_limiter,
        content_filter=_content_filter,
        anomaly_scorer=_anomaly,
        new_account_days=_new_account_days,
    )
    _lifecycle_service = ReviewLifecycleService(
        store=_store,
        directory=_directory,
        engine=engine,
        notifier=_notifier,
        recipient_roles=_recipient_roles,
    )
    _admin_service = ModerationAdminService(store=_store, audit=_audit)
    _contact_service = ContactScreeningService(
        directory=_directory,
        notifier=_notifier,
        rate_limiter=_contact_limiter,
        content_filter=_content_filter,
    )


def configure(
    *,
    store: Optional[ReviewStore] = None,
    directory: Optional[UserDirectory] = None,
    audit: Optional[AuditRepository] = None,
    notifier: Optional[Notifier] = None,
    review_limiter: Optional[RateLimiter] = None,
    contact_limiter: Optional[RateLimiter] = None,
    anomaly_threshold: Optional[float] = None,
    new_account_days: Optional[float] = None,
    recipient_roles: Optional[Sequence[str]] = None,
) -> None:
    global _store, _directory, _audit, _notifier, _review_limiter, _contact_limiter
    global _anomaly, _new_account_days, _recipient_roles
    if store is not None:
        _store = store
    if directory is not None:
        _directory = directory
    if audit is not None:
        _audit = audit
    if notifier is not None:
        _notifier = notifier
    if review_limiter is not None:
        _review_limiter = review_limiter
    if contact_limiter is not None:
        _contact_limiter = contact_limiter
    if anomaly_threshold is not None:
        _anomaly = AnomalyScorer(threshold=anomaly_threshold)
    if new_account_days is not None:
        _new_account_days = new_account_days
    if recipient_roles is not None:
        _recipient_roles = tuple(recipient_roles)
    _rebuild_services()


def configure_from_settings(
    config: Settings,
    *,
    pool: Optional[asyncpg.Pool] = None,
    redis_conn: Redis | RedisProxy | None = None,
) -> None:
    """Select storage, limiter, and notifier backends named by ``config``."""

    store: ReviewStore | None = None
    directory: UserDirectory | None = None
    audit: AuditRepository | None = None
    if config.store_backend == "postgres":
        if pool is None:
            raise RuntimeError("store_backend=postgres requires a database pool")
        from reviewguard.moderation.infra.review_repo import PostgresAuditRepository, PostgresReviewStore
        from reviewguard.moderation.infra.user_directory import PostgresUserDirectory

        store = PostgresReviewStore(pool)
        directory = PostgresUserDirectory(pool)
        audit = PostgresAuditRepository(pool)

    if config.rate_limit_backend == "redis":
        if redis_conn is None:
            raise RuntimeError("rate_limit_backend=redis requires a redis client")
        review_limiter: RateLimiter = RedisRateLimiter(
            redis_conn,
            namespace="rl:review",
            max_per_window=config.review_rate_limit_max,
            window_seconds=config.review_rate_limit_window_seconds,
        )
        contact_limiter: RateLimiter = RedisRateLimiter(
            redis_conn,
            namespace="rl:contact",
            max_per_window=config.contact_rate_limit_max,
            window_seconds=config.contact_rate_limit_window_seconds,
        )
    else:
        review_limiter = _memory_review_limiter(config)
        contact_limiter = _memory_contact_limiter(config)

    notifier: Notifier | None = None
    if config.notifier_backend == "smtp":
        from reviewguard.moderation.infra.smtp_notifier import SmtpNotifier

        notifier = SmtpNotifier(directory=directory or _directory, config=config)

    configure(
        store=store,
        directory=directory,
        audit=audit,
        notifier=notifier,
        review_limiter=review_limiter,
        contact_limiter=contact_limiter,
        anomaly_threshold=config.anomaly_threshold,
        new_account_days=config.new_account_days,
        recipient_roles=config.review_recipient_roles,
    )


def reset_memory_state() -> None:
    """Swap every backend for a fresh in-memory instance."""

    configure(
        store=InMemoryReviewStore(),
        directory=InMemoryUserDirectory(),
        audit=InMemoryAuditRepository(),
        notifier=LoggingNotifier(),
        review_limiter=_memory_review_limiter(settings),
        contact_limiter=_memory_contact_limiter(settings),
        anomaly_threshold=settings.anomaly_threshold,
        new_account_days=settings.new_account_days,
        recipient_roles=settings.review_recipient_roles,
    )


def get_store() -> ReviewStore:
    return _store


def get_directory() -> UserDirectory:
    return _directory


def get_lifecycle_service() -> ReviewLifecycleService:
    assert _lifecycle_service is not None
    return _lifecycle_service


def get_admin_service() -> ModerationAdminService:
    assert _admin_service is not None
    return _admin_service


def get_contact_service() -> ContactScreeningService:
    assert _contact_service is not None
    return _contact_service


_rebuild_services()
