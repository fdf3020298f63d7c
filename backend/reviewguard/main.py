"""FastAPI application entrypoint for the review-guard backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reviewguard import obs
from reviewguard.api import ops
from reviewguard.api.errors import install_error_handlers
from reviewguard.infra import postgres
from reviewguard.infra.redis import redis_client
from reviewguard.moderation import configure_from_settings
from reviewguard.moderation import router as reviews_router
from reviewguard.moderation.infra.review_repo import ensure_schema
from reviewguard.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = None
	if settings.store_backend == "postgres":
		pool = await postgres.init_pool()
		await ensure_schema(pool)
	configure_from_settings(settings, pool=pool, redis_conn=redis_client)
	logger.info(
		"review_guard_started",
		extra={
			"store_backend": settings.store_backend,
			"rate_limit_backend": settings.rate_limit_backend,
			"notifier_backend": settings.notifier_backend,
		},
	)
	try:
		yield
	finally:
		if pool is not None:
			await postgres.close_pool()


app = FastAPI(title="Review Guard", lifespan=lifespan)
install_error_handlers(app)
obs.init(app)

app.include_router(ops.router)
app.include_router(reviews_router)
