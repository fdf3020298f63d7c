"""Review submission and public listing endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from reviewguard.infra.auth import AuthenticatedUser, get_current_user
from reviewguard.moderation.api.schemas import ReviewIn, ReviewOut, ReviewPageOut, SubmissionOut
from reviewguard.moderation.domain.container import get_lifecycle_service
from reviewguard.moderation.domain.lifecycle import ReviewLifecycleService
from reviewguard.moderation.domain.reviews import ReviewSubmission

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def get_lifecycle_service_dep() -> ReviewLifecycleService:
    return get_lifecycle_service()


@router.post("", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
async def submit_review(
    payload: ReviewIn,
    service: ReviewLifecycleService = Depends(get_lifecycle_service_dep),
    author: AuthenticatedUser = Depends(get_current_user),
) -> SubmissionOut:
    result = await service.submit(
        ReviewSubmission(
            author_id=author.id,
            recipient_id=payload.recipient_id,
            rating=payload.rating,
            title=payload.title,
            comment=payload.comment,
            images=tuple(payload.images),
        )
    )
    flags = [] if result.published else [flag.value for flag in result.blocking_flags]
    return SubmissionOut(review=ReviewOut.from_record(result.record), flags=flags)


@router.get("", response_model=ReviewPageOut)
async def list_reviews(
    recipient_id: Optional[str] = Query(default=None),
    rating: Optional[int] = Query(default=None, ge=1, le=5),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    service: ReviewLifecycleService = Depends(get_lifecycle_service_dep),
) -> ReviewPageOut:
    result = await service.list_public(recipient_id=recipient_id, rating=rating, page=page, limit=limit)
    return ReviewPageOut.from_page(result)
