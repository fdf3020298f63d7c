"""Human moderation of held reviews.

A moderator decision is terminal until another moderator changes it; nothing
here re-runs the automated scoring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, Sequence

from reviewguard.moderation.domain.errors import ReviewNotFoundError, ReviewValidationError
from reviewguard.moderation.domain.reviews import ReviewPage, ReviewRecord, ReviewStore
from reviewguard.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

MODERATE_REVIEW = "MODERATE_REVIEW"


@dataclass(slots=True)
class ModerationAuditEntry:
    moderator_id: str
    review_id: str
    action: str
    is_approved: bool | None
    is_hidden: bool | None
    reason: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditRepository(Protocol):
    async def insert(self, entry: ModerationAuditEntry) -> None:
        ...

    async def list_recent(self, limit: int = 50) -> Sequence[ModerationAuditEntry]:
        ...


class InMemoryAuditRepository(AuditRepository):
    def __init__(self) -> None:
        self.entries: list[ModerationAuditEntry] = []

    async def insert(self, entry: ModerationAuditEntry) -> None:
        self.entries.append(entry)

    async def list_recent(self, limit: int = 50) -> Sequence[ModerationAuditEntry]:
        return list(reversed(self.entries))[:limit]


class ModerationAdminService:
    def __init__(self, *, store: ReviewStore, audit: AuditRepository) -> None:
        self._store = store
        self._audit = audit

    async def list_held(self) -> list[ReviewRecord]:
        """Reviews awaiting a human decision, newest first."""

        held = list(await self._store.list_by_approval(False))
        held.sort(key=lambda record: record.created_at, reverse=True)
        return held

    async def list_reviews(
        self,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> ReviewPage:
        page = max(1, page)
        limit = max(1, min(limit, 100))
        items, total = await self._store.list_reviews(
            is_approved=is_approved,
            is_hidden=is_hidden,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ReviewPage(items=items, total=total, page=page, limit=limit)

    async def moderate(
        self,
        review_id: str,
        *,
        moderator_id: str,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
        reason: str | None = None,
    ) -> ReviewRecord:
        if is_approved is None and is_hidden is None:
            raise ReviewValidationError({"moderation": ["is_approved or is_hidden is required"]})
        updated = await self._store.update_moderation(review_id, is_approved=is_approved, is_hidden=is_hidden)
        if updated is None:
            raise ReviewNotFoundError()

        await self._audit.insert(
            ModerationAuditEntry(
                moderator_id=moderator_id,
                review_id=review_id,
                action=MODERATE_REVIEW,
                is_approved=is_approved,
                is_hidden=is_hidden,
                reason=reason,
            )
        )
        if is_approved is not None:
            obs_metrics.inc_moderation_action("approve" if is_approved else "unapprove")
        if is_hidden is not None:
            obs_metrics.inc_moderation_action("hide" if is_hidden else "unhide")
        logger.info(
            "review_moderated",
            extra={
                "review_id": review_id,
                "moderator_id": moderator_id,
                "is_approved": is_approved,
                "is_hidden": is_hidden,
            },
        )
        return updated

    async def list_audit(self, limit: int = 50) -> Sequence[ModerationAuditEntry]:
        return await self._audit.list_recent(limit=max(1, min(limit, 200)))
