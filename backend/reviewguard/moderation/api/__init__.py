"""Review workflow API routers."""

from fastapi import APIRouter

from . import admin, contact, reviews

router = APIRouter()
router.include_router(reviews.router)
router.include_router(admin.router)
router.include_router(contact.router)

__all__ = ["router"]
