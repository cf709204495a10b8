"""API v1 router initialization."""

from fastapi import APIRouter

from gallery.api.v1.cards import router as cards_router
from gallery.api.v1.images import router as images_router

router = APIRouter()

router.include_router(cards_router, prefix="/users/{user_id}/cards", tags=["Cards"])
router.include_router(
    images_router, prefix="/users/{user_id}/cards/{card_id}/images", tags=["Images"]
)
