"""Process-wide asyncpg pool used when reviews are stored in PostgreSQL."""

from __future__ import annotations

import logging
from typing import Optional

import asyncpg

from reviewguard.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool() -> asyncpg.pool.Pool:
	"""Create the pool on first use; later calls return the same pool."""
	global _pool
	if _pool is None:
		_pool = await asyncpg.create_pool(
			dsn=settings.postgres_url,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
		)
		logger.info(
			"postgres_pool_ready",
			extra={"min_size": settings.postgres_min_pool_size, "max_size": settings.postgres_max_pool_size},
		)
	return _pool


async def close_pool() -> None:
	global _pool
	if _pool is None:
		return
	pool, _pool = _pool, None
	await pool.close()
