"""Moderator endpoints for held reviews and the audit trail."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from reviewguard.infra.auth import AuthenticatedUser, require_roles
from reviewguard.moderation.api.schemas import (
    AdminReviewOut,
    AdminReviewPageOut,
    AuditEntryOut,
    ModerateIn,
)
from reviewguard.moderation.domain.admin import ModerationAdminService
from reviewguard.moderation.domain.container import get_admin_service

router = APIRouter(prefix="/api/admin", tags=["reviews-admin"])

_require_admin = require_roles("admin")


def get_admin_service_dep() -> ModerationAdminService:
    return get_admin_service()


@router.get("/reviews/held", response_model=List[AdminReviewOut])
async def list_held(
    service: ModerationAdminService = Depends(get_admin_service_dep),
    _: AuthenticatedUser = Depends(_require_admin),
) -> List[AdminReviewOut]:
    return [AdminReviewOut.from_record(record) for record in await service.list_held()]


@router.get("/reviews", response_model=AdminReviewPageOut)
async def list_reviews(
    is_approved: Optional[bool] = Query(default=None),
    is_hidden: Optional[bool] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    service: ModerationAdminService = Depends(get_admin_service_dep),
    _: AuthenticatedUser = Depends(_require_admin),
) -> AdminReviewPageOut:
    result = await service.list_reviews(is_approved=is_approved, is_hidden=is_hidden, page=page, limit=limit)
    return AdminReviewPageOut.from_page(result)


@router.put("/reviews/{review_id}/moderate", response_model=AdminReviewOut)
async def moderate_review(
    review_id: str,
    payload: ModerateIn,
    service: ModerationAdminService = Depends(get_admin_service_dep),
    moderator: AuthenticatedUser = Depends(_require_admin),
) -> AdminReviewOut:
    record = await service.moderate(
        review_id,
        moderator_id=moderator.id,
        is_approved=payload.is_approved,
        is_hidden=payload.is_hidden,
        reason=payload.reason,
    )
    return AdminReviewOut.from_record(record)


@router.get("/audit", response_model=List[AuditEntryOut])
async def list_audit(
    limit: int = Query(default=50, ge=1, le=200),
    service: ModerationAdminService = Depends(get_admin_service_dep),
    _: AuthenticatedUser = Depends(_require_admin),
) -> List[AuditEntryOut]:
    return [AuditEntryOut.from_entry(entry) for entry in await service.list_audit(limit=limit)]
