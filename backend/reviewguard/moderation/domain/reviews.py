"""Review records, submissions, and the storage contracts they flow through."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Mapping, Protocol, Sequence
from urllib.parse import urlparse
from uuid import uuid4

from reviewguard.moderation.domain.errors import DuplicateReviewError, ReviewValidationError

RATING_MIN = 1
RATING_MAX = 5
TITLE_MIN, TITLE_MAX = 3, 100
COMMENT_MIN, COMMENT_MAX = 10, 1000
MAX_IMAGES = 5

# Letters and digits in any script, whitespace, and everyday punctuation.
_ALLOWED_TEXT = re.compile(r"^[\w\s.,!?'\"()\-:;&/%+#@*’‘“”…]*$")


@dataclass(slots=True)
class ReviewSubmission:
    author_id: str
    recipient_id: str
    rating: int
    title: str | None = None
    comment: str | None = None
    images: tuple[str, ...] = ()

    def normalized(self) -> "ReviewSubmission":
        """Strip text fields; blank text counts as absent."""

        title = self.title.strip() if self.title else None
        comment = self.comment.strip() if self.comment else None
        return ReviewSubmission(
            author_id=str(self.author_id),
            recipient_id=str(self.recipient_id),
            rating=self.rating,
            title=title or None,
            comment=comment or None,
            images=tuple(self.images or ()),
        )


@dataclass(slots=True)
class ReviewRecord:
    id: str
    author_id: str
    recipient_id: str
    rating: int
    title: str | None
    comment: str | None
    images: tuple[str, ...]
    is_approved: bool
    is_hidden: bool = False
    is_verified: bool = False
    flags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_submission(
        cls,
        submission: ReviewSubmission,
        *,
        is_approved: bool,
        flags: Sequence[str] = (),
        now: datetime | None = None,
    ) -> "ReviewRecord":
        timestamp = now or datetime.now(timezone.utc)
        return cls(
            id=str(uuid4()),
            author_id=submission.author_id,
            recipient_id=submission.recipient_id,
            rating=submission.rating,
            title=submission.title,
            comment=submission.comment,
            images=tuple(submission.images),
            is_approved=is_approved,
            flags=tuple(flags),
            created_at=timestamp,
            updated_at=timestamp,
        )


@dataclass(slots=True)
class UserSummary:
    """What the account directory tells us about a user."""

    id: str
    role: str
    created_at: datetime
    email: str | None = None

    def account_age_days(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.created_at).total_seconds() / 86400


@dataclass(slots=True)
class ReviewPage:
    items: list[ReviewRecord]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


class ReviewStore(Protocol):
    """Storage contract for review records."""

    async def create(self, record: ReviewRecord) -> ReviewRecord:
        """Insert; raises DuplicateReviewError when the (author, recipient) pair exists."""
        ...

    async def get(self, review_id: str) -> ReviewRecord | None:
        ...

    async def find_by_pair(self, author_id: str, recipient_id: str) -> ReviewRecord | None:
        ...

    async def update_moderation(
        self,
        review_id: str,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
    ) -> ReviewRecord | None:
        ...

    async def list_by_approval(self, is_approved: bool) -> Sequence[ReviewRecord]:
        ...

    async def list_reviews(
        self,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
        recipient_id: str | None = None,
        rating: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ReviewRecord], int]:
        ...

    async def ratings_by_author(self, author_id: str) -> list[int]:
        ...


class UserDirectory(Protocol):
    """Read-only view of the account service."""

    async def get_user(self, user_id: str) -> UserSummary | None:
        ...


class InMemoryReviewStore(ReviewStore):
    """Simple repository implementation for development and tests."""

    def __init__(self) -> None:
        self._items: dict[str, ReviewRecord] = {}
        self._by_pair: dict[tuple[str, str], str] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: ReviewRecord) -> ReviewRecord:
        pair = (record.author_id, record.recipient_id)
        async with self._lock:
            if pair in self._by_pair:
                raise DuplicateReviewError()
            self._items[record.id] = record
            self._by_pair[pair] = record.id
        return record

    async def get(self, review_id: str) -> ReviewRecord | None:
        return self._items.get(review_id)

    async def find_by_pair(self, author_id: str, recipient_id: str) -> ReviewRecord | None:
        review_id = self._by_pair.get((author_id, recipient_id))
        return self._items.get(review_id) if review_id else None

    async def update_moderation(
        self,
        review_id: str,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
    ) -> ReviewRecord | None:
        async with self._lock:
            current = self._items.get(review_id)
            if current is None:
                return None
            changes: dict[str, object] = {"updated_at": datetime.now(timezone.utc)}
            if is_approved is not None:
                changes["is_approved"] = is_approved
            if is_hidden is not None:
                changes["is_hidden"] = is_hidden
            updated = replace(current, **changes)
            self._items[review_id] = updated
        return updated

    async def list_by_approval(self, is_approved: bool) -> Sequence[ReviewRecord]:
        items, _ = await self.list_reviews(is_approved=is_approved, limit=len(self._items) or 1)
        return items

    async def list_reviews(
        self,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
        recipient_id: str | None = None,
        rating: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ReviewRecord], int]:
        matches = [
            item
            for item in self._items.values()
            if (is_approved is None or item.is_approved == is_approved)
            and (is_hidden is None or item.is_hidden == is_hidden)
            and (recipient_id is None or item.recipient_id == recipient_id)
            and (rating is None or item.rating == rating)
        ]
        matches.sort(key=lambda item: item.created_at, reverse=True)
        return matches[offset : offset + limit], len(matches)

    async def ratings_by_author(self, author_id: str) -> list[int]:
        return [item.rating for item in self._items.values() if item.author_id == author_id]


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: Mapping[str, UserSummary] | None = None) -> None:
        self.users: dict[str, UserSummary] = dict(users or {})

    def add(self, user: UserSummary) -> UserSummary:
        self.users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> UserSummary | None:
        return self.users.get(user_id)


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_text(errors: dict[str, list[str]], name: str, value: str | None, lo: int, hi: int) -> None:
    if value is None:
        return
    if not lo <= len(value) <= hi:
        errors.setdefault(name, []).append(f"{name} must be between {lo} and {hi} characters")
    if not _ALLOWED_TEXT.match(value):
        errors.setdefault(name, []).append(f"{name} contains unsupported characters")


def validate_submission(submission: ReviewSubmission) -> None:
    """Structural checks; expects a normalized submission."""

    errors: dict[str, list[str]] = {}
    if not submission.author_id:
        errors["author_id"] = ["author_id is required"]
    if not submission.recipient_id:
        errors["recipient_id"] = ["recipient_id is required"]
    rating = submission.rating
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        errors["rating"] = [f"rating must be an integer between {RATING_MIN} and {RATING_MAX}"]
    _check_text(errors, "title", submission.title, TITLE_MIN, TITLE_MAX)
    _check_text(errors, "comment", submission.comment, COMMENT_MIN, COMMENT_MAX)
    if submission.title is None and submission.comment is None:
        errors.setdefault("review", []).append("a title or a comment is required")
    if len(submission.images) > MAX_IMAGES:
        errors.setdefault("images", []).append(f"at most {MAX_IMAGES} images are allowed")
    bad_urls = [url for url in submission.images if not isinstance(url, str) or not _is_url(url)]
    if bad_urls:
        errors.setdefault("images", []).append("images must be http(s) URLs")
    if errors:
        raise ReviewValidationError(errors)
