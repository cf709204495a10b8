"""Service layer for business logic."""

from gallery.services.card_service import CardService
from gallery.services.gallery_editor import DragEndEvent, GalleryEditor, GalleryUpdate
from gallery.services.image_upload_service import ImageUploadService, get_image_storage_path

__all__ = [
    "CardService",
    "DragEndEvent",
    "GalleryEditor",
    "GalleryUpdate",
    "ImageUploadService",
    "get_image_storage_path",
]
