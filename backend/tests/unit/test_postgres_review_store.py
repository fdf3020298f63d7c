from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import asyncpg
import pytest

from reviewguard.moderation.domain.errors import DuplicateReviewError
from reviewguard.moderation.domain.reviews import ReviewRecord, ReviewSubmission
from reviewguard.moderation.infra.review_repo import PostgresReviewStore
from reviewguard.moderation.infra.user_directory import PostgresUserDirectory


def _row(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    row = {
        "id": uuid4(),
        "author_id": "author",
        "recipient_id": "artist",
        "rating": 4,
        "title": "Great work",
        "comment": None,
        "images": [],
        "is_approved": False,
        "is_hidden": False,
        "is_verified": False,
        "flags": ["NEW_ACCOUNT"],
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def pool() -> MagicMock:
    pool = MagicMock()
    pool.fetchrow = AsyncMock()
    pool.fetch = AsyncMock(return_value=[])
    pool.fetchval = AsyncMock(return_value=0)
    pool.execute = AsyncMock()
    return pool


@pytest.mark.asyncio
async def test_create_maps_row_back_to_record(pool) -> None:
    row = _row()
    pool.fetchrow.return_value = row
    submission = ReviewSubmission(author_id="author", recipient_id="artist", rating=4, title="Great work")
    record = ReviewRecord.from_submission(submission, is_approved=False, flags=("NEW_ACCOUNT",))

    stored = await PostgresReviewStore(pool).create(record)

    assert stored.id == str(row["id"])
    assert stored.flags == ("NEW_ACCOUNT",)
    args = pool.fetchrow.await_args.args
    assert args[1] == record.id
    assert args[11] == ["NEW_ACCOUNT"]


@pytest.mark.asyncio
async def test_unique_violation_becomes_duplicate(pool) -> None:
    pool.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key value")
    submission = ReviewSubmission(author_id="author", recipient_id="artist", rating=4, title="Great work")

    with pytest.raises(DuplicateReviewError):
        await PostgresReviewStore(pool).create(ReviewRecord.from_submission(submission, is_approved=True))


@pytest.mark.asyncio
async def test_list_reviews_builds_filters_in_order(pool) -> None:
    pool.fetchval.return_value = 7
    pool.fetch.return_value = [_row(), _row(author_id="other")]

    items, total = await PostgresReviewStore(pool).list_reviews(
        is_approved=True, is_hidden=False, rating=5, limit=2, offset=4
    )

    assert total == 7
    assert [item.author_id for item in items] == ["author", "other"]
    count_sql, *count_params = pool.fetchval.await_args.args
    assert "is_approved = $1 AND is_hidden = $2 AND rating = $3" in count_sql
    assert count_params == [True, False, 5]
    select_sql, *select_params = pool.fetch.await_args.args
    assert "LIMIT $4 OFFSET $5" in select_sql
    assert select_params == [True, False, 5, 2, 4]


@pytest.mark.asyncio
async def test_malformed_id_is_not_found(pool) -> None:
    pool.fetchrow.side_effect = asyncpg.DataError("invalid input syntax for type uuid")

    assert await PostgresReviewStore(pool).get("not-a-uuid") is None


@pytest.mark.asyncio
async def test_ratings_by_author(pool) -> None:
    pool.fetch.return_value = [{"rating": 4}, {"rating": 5}]

    assert await PostgresReviewStore(pool).ratings_by_author("author") == [4, 5]


@pytest.mark.asyncio
async def test_directory_lookup(pool) -> None:
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    pool.fetchrow.return_value = {"id": "artist", "role": "ARTIST", "created_at": created, "email": None}

    user = await PostgresUserDirectory(pool).get_user("artist")

    assert user is not None
    assert user.role == "ARTIST"
    assert user.created_at == created
