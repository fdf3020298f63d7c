"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewguard.moderation.domain.errors import (
    ContentRejectedError,
    ReviewValidationError,
    ReviewWorkflowError,
)
from reviewguard.obs.logging import current_request_id

logger = logging.getLogger(__name__)


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or current_request_id()


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ReviewWorkflowError)
    async def workflow_exc_handler(request: Request, exc: ReviewWorkflowError):  # type: ignore[override]
        payload: dict[str, object] = {"detail": exc.code, "request_id": get_request_id(request)}
        if isinstance(exc, ReviewValidationError):
            payload["errors"] = exc.errors
        elif isinstance(exc, ContentRejectedError):
            payload["errors"] = {exc.field: list(exc.issues)}
        if exc.status_code >= 500:
            logger.error("review_workflow_failure", extra={"code": exc.code})
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        payload = {"detail": exc.detail, "request_id": get_request_id(request)}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        payload = {
            "detail": "validation_error",
            "errors": jsonable_encoder(exc.errors()),
            "request_id": get_request_id(request),
        }
        return JSONResponse(status_code=422, content=payload)
