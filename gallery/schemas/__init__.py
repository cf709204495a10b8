"""Pydantic schemas for API request/response validation."""

from gallery.schemas.card import CardDocument, CardImagesDTO, MigrationStats, StructureReport
from gallery.schemas.image import (
    DeleteResult,
    ImagePatch,
    ImagePreview,
    ImageRecord,
    ReorderRequest,
    create_image_metadata,
)

__all__ = [
    # Card
    "CardDocument",
    "CardImagesDTO",
    "MigrationStats",
    "StructureReport",
    # Image
    "DeleteResult",
    "ImagePatch",
    "ImagePreview",
    "ImageRecord",
    "ReorderRequest",
    "create_image_metadata",
]
