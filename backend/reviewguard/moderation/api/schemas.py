"""Wire models for the review endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from reviewguard.moderation.domain.admin import ModerationAuditEntry
from reviewguard.moderation.domain.reviews import ReviewPage, ReviewRecord


class ReviewIn(BaseModel):
    recipient_id: str
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class ReviewOut(BaseModel):
    id: str
    author_id: str
    recipient_id: str
    rating: int
    title: Optional[str]
    comment: Optional[str]
    images: List[str]
    is_approved: bool
    is_verified: bool
    created_at: datetime

    @classmethod
    def from_record(cls, record: ReviewRecord) -> "ReviewOut":
        return cls(
            id=record.id,
            author_id=record.author_id,
            recipient_id=record.recipient_id,
            rating=record.rating,
            title=record.title,
            comment=record.comment,
            images=list(record.images),
            is_approved=record.is_approved,
            is_verified=record.is_verified,
            created_at=record.created_at,
        )


class AdminReviewOut(ReviewOut):
    is_hidden: bool
    flags: List[str]
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ReviewRecord) -> "AdminReviewOut":
        base = ReviewOut.from_record(record).model_dump()
        return cls(**base, is_hidden=record.is_hidden, flags=list(record.flags), updated_at=record.updated_at)


class SubmissionOut(BaseModel):
    review: ReviewOut
    flags: List[str]


class ReviewPageOut(BaseModel):
    items: List[ReviewOut]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_page(cls, page: ReviewPage) -> "ReviewPageOut":
        return cls(
            items=[ReviewOut.from_record(item) for item in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )


class AdminReviewPageOut(BaseModel):
    items: List[AdminReviewOut]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_page(cls, page: ReviewPage) -> "AdminReviewPageOut":
        return cls(
            items=[AdminReviewOut.from_record(item) for item in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )


class ModerateIn(BaseModel):
    is_approved: Optional[bool] = None
    is_hidden: Optional[bool] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class AuditEntryOut(BaseModel):
    moderator_id: str
    review_id: str
    action: str
    is_approved: Optional[bool]
    is_hidden: Optional[bool]
    reason: Optional[str]
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: ModerationAuditEntry) -> "AuditEntryOut":
        return cls(
            moderator_id=entry.moderator_id,
            review_id=entry.review_id,
            action=entry.action,
            is_approved=entry.is_approved,
            is_hidden=entry.is_hidden,
            reason=entry.reason,
            created_at=entry.created_at,
        )


class ContactIn(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    sender_name: str = Field(..., min_length=1, max_length=100)
    sender_email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    sender_phone: Optional[str] = Field(default=None, max_length=40)


class ContactAccepted(BaseModel):
    status: str = "accepted"
