"""Account lookups against the shared users table."""

from __future__ import annotations

import asyncpg

from reviewguard.moderation.domain.reviews import UserDirectory, UserSummary


class PostgresUserDirectory(UserDirectory):
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get_user(self, user_id: str) -> UserSummary | None:
        row = await self._pool.fetchrow(
            "SELECT id, role, created_at, email FROM users WHERE id::text = $1",
            user_id,
        )
        if row is None:
            return None
        return UserSummary(
            id=str(row["id"]),
            role=str(row["role"]),
            created_at=row["created_at"],
            email=row["email"],
        )
