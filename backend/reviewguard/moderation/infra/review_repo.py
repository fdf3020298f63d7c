"""PostgreSQL persistence for review records and the moderation audit log."""

from __future__ import annotations

from typing import Sequence

import asyncpg

from reviewguard.moderation.domain.admin import AuditRepository, ModerationAuditEntry
from reviewguard.moderation.domain.errors import DuplicateReviewError
from reviewguard.moderation.domain.reviews import ReviewRecord, ReviewStore

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS reviews (
    id UUID PRIMARY KEY,
    author_id TEXT NOT NULL,
    recipient_id TEXT NOT NULL,
    rating SMALLINT NOT NULL CHECK (rating BETWEEN 1 AND 5),
    title VARCHAR(100),
    comment VARCHAR(1000),
    images TEXT[] NOT NULL DEFAULT '{}',
    is_approved BOOLEAN NOT NULL,
    is_hidden BOOLEAN NOT NULL DEFAULT FALSE,
    is_verified BOOLEAN NOT NULL DEFAULT FALSE,
    flags TEXT[] NOT NULL DEFAULT '{}',
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    CONSTRAINT reviews_author_recipient_key UNIQUE (author_id, recipient_id)
);
CREATE INDEX IF NOT EXISTS reviews_approval_idx ON reviews (is_approved, created_at DESC);
CREATE TABLE IF NOT EXISTS review_moderation_audit (
    id BIGSERIAL PRIMARY KEY,
    moderator_id TEXT NOT NULL,
    review_id UUID NOT NULL,
    action TEXT NOT NULL,
    is_approved BOOLEAN,
    is_hidden BOOLEAN,
    reason TEXT,
    created_at TIMESTAMPTZ NOT NULL
);
"""

_COLUMNS = (
    "id, author_id, recipient_id, rating, title, comment, images, is_approved, "
    "is_hidden, is_verified, flags, created_at, updated_at"
)


async def ensure_schema(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)


def _row_to_record(row: asyncpg.Record) -> ReviewRecord:
    return ReviewRecord(
        id=str(row["id"]),
        author_id=str(row["author_id"]),
        recipient_id=str(row["recipient_id"]),
        rating=int(row["rating"]),
        title=row["title"],
        comment=row["comment"],
        images=tuple(row["images"] or ()),
        is_approved=bool(row["is_approved"]),
        is_hidden=bool(row["is_hidden"]),
        is_verified=bool(row["is_verified"]),
        flags=tuple(row["flags"] or ()),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresReviewStore(ReviewStore):
    """Stores review records in the reviews table."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def create(self, record: ReviewRecord) -> ReviewRecord:
        try:
            row = await self._pool.fetchrow(
                f"""
                INSERT INTO reviews ({_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
                RETURNING {_COLUMNS}
                """,
                record.id,
                record.author_id,
                record.recipient_id,
                record.rating,
                record.title,
                record.comment,
                list(record.images),
                record.is_approved,
                record.is_hidden,
                record.is_verified,
                list(record.flags),
                record.created_at,
                record.updated_at,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateReviewError() from exc
        if row is None:  # pragma: no cover - asyncpg always returns a row for RETURNING
            raise RuntimeError("Failed to insert review")
        return _row_to_record(row)

    async def get(self, review_id: str) -> ReviewRecord | None:
        try:
            row = await self._pool.fetchrow(f"SELECT {_COLUMNS} FROM reviews WHERE id = $1::uuid", review_id)
        except asyncpg.DataError:
            return None
        return _row_to_record(row) if row else None

    async def find_by_pair(self, author_id: str, recipient_id: str) -> ReviewRecord | None:
        row = await self._pool.fetchrow(
            f"SELECT {_COLUMNS} FROM reviews WHERE author_id = $1 AND recipient_id = $2",
            author_id,
            recipient_id,
        )
        return _row_to_record(row) if row else None

    async def update_moderation(
        self,
        review_id: str,
        *,
        is_approved: bool | None = None,
        is_hidden: bool | None = None,
    ) -> ReviewRecord | None:
        try:
            row = await self._pool.fetchrow(
                f"""
                UPDATE reviews
                SET is_approved = COALESCE($2, is_approved),
                    is_hidden = COALESCE($3, is_hidden),
                    updated_at = now()
                WHERE id = $1::uuid
                RETURNING {_COLUMNS}
                """,
                review_id,
                is_approved,
                is_hidden,
            )
        except asyncpg.DataError:
            return None
        return _row_to_record(row) if row else None

    async def list_by_approval(self, is_approved: bool) -> Sequence[ReviewRecord]:
        rows = await self._pool.fetch(
            f"SELECT {_COLUMNS} FROM reviews WHERE is_approved = $1 ORDER BY created_at DESC",
            is_approved,
        )
        return [_row_to_record(row) for row in rows]

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
        params: list[object] = []
        clauses: list[str] = []
        for column, value in (
            ("is_approved", is_approved),
            ("is_hidden", is_hidden),
            ("recipient_id", recipient_id),
            ("rating", rating),
        ):
            if value is not None:
                params.append(value)
                clauses.append(f"{column} = ${len(params)}")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        total = await self._pool.fetchval(f"SELECT count(*) FROM reviews {where}", *params)
        params.extend([limit, offset])
        rows = await self._pool.fetch(
            f"""
            SELECT {_COLUMNS} FROM reviews {where}
            ORDER BY created_at DESC
            LIMIT ${len(params) - 1} OFFSET ${len(params)}
            """,
            *params,
        )
        return [_row_to_record(row) for row in rows], int(total or 0)

    async def ratings_by_author(self, author_id: str) -> list[int]:
        rows = await self._pool.fetch("SELECT rating FROM reviews WHERE author_id = $1", author_id)
        return [int(row["rating"]) for row in rows]


class PostgresAuditRepository(AuditRepository):
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def insert(self, entry: ModerationAuditEntry) -> None:
        await self._pool.execute(
            """
            INSERT INTO review_moderation_audit
                (moderator_id, review_id, action, is_approved, is_hidden, reason, created_at)
            VALUES ($1, $2::uuid, $3, $4, $5, $6, $7)
            """,
            entry.moderator_id,
            entry.review_id,
            entry.action,
            entry.is_approved,
            entry.is_hidden,
            entry.reason,
            entry.created_at,
        )

    async def list_recent(self, limit: int = 50) -> Sequence[ModerationAuditEntry]:
        rows = await self._pool.fetch(
            """
            SELECT moderator_id, review_id, action, is_approved, is_hidden, reason, created_at
            FROM review_moderation_audit
            ORDER BY created_at DESC, id DESC
            LIMIT $1
            """,
            limit,
        )
        return [
            ModerationAuditEntry(
                moderator_id=str(row["moderator_id"]),
                review_id=str(row["review_id"]),
                action=str(row["action"]),
                is_approved=row["is_approved"],
                is_hidden=row["is_hidden"],
                reason=row["reason"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
