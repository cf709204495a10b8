"""In-memory image list editing for one open card form."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from gallery.core.config import Settings, get_settings
from gallery.images.collection import move_image, reflow_images
from gallery.images.compression import compress_multiple_images
from gallery.images.files import ImageFile
from gallery.images.previews import PreviewRegistry, cleanup_previews, create_image_previews
from gallery.images.validation import validate_multiple_images
from gallery.schemas.image import ImagePreview, ImageRecord

IMAGES_FIELD = "images"


@dataclass
class DragEndEvent:
    """Result of a drag-and-drop gesture; destination is None when dropped outside."""

    source_index: int
    destination_index: int | None


@dataclass
class GalleryUpdate:
    """Outcome of an editor operation."""

    ok: bool
    message: str | None = None
    errors: list[str] = field(default_factory=list)
    added: list[ImagePreview] = field(default_factory=list)


class GalleryEditor:
    """Holds the image list of a card being edited.

    The list mixes persisted ImageRecords and pending ImagePreviews. Each
    operation builds a new list and swaps it in with a single assignment.
    Call ``close()`` when the form goes away to release preview handles.
    """

    def __init__(
        self,
        images: Sequence[ImageRecord] = (),
        *,
        max_images: int | None = None,
        allow_reordering: bool = True,
        previews: PreviewRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.images: list[ImageRecord] = list(images)
        self.max_images = (
            max_images if max_images is not None else self.settings.max_images_per_card
        )
        self.allow_reordering = allow_reordering
        self.previews = previews if previews is not None else PreviewRegistry()
        self.field_errors: dict[str, str] = {}

    @property
    def remaining_slots(self) -> int:
        return self.max_images - len(self.images)

    async def add_images(self, files: Sequence[ImageFile]) -> GalleryUpdate:
        """Validate, compress and append files as previews.

        Slot limits are checked before validation, so an oversized batch is
        rejected without touching any file.
        """
        if not files:
            return GalleryUpdate(ok=False, message="No files selected")

        remaining = self.remaining_slots
        if remaining <= 0:
            message = f"Maximum {self.max_images} images allowed"
            self.field_errors[IMAGES_FIELD] = message
            return GalleryUpdate(ok=False, message=message)

        if len(files) > remaining:
            message = (
                f"You can only add {remaining} more image(s). "
                f"Maximum {self.max_images} images allowed."
            )
            self.field_errors[IMAGES_FIELD] = message
            return GalleryUpdate(ok=False, message=message)

        validation = validate_multiple_images(
            files,
            max_images=self.max_images,
            max_file_size=self.settings.max_file_size,
            allowed_formats=self.settings.allowed_formats,
        )
        if not validation.is_valid:
            message = ", ".join(validation.errors)
            self.field_errors[IMAGES_FIELD] = message
            return GalleryUpdate(ok=False, message=message, errors=validation.errors)

        compressed = await compress_multiple_images(
            validation.valid_files,
            quality=self.settings.compression_quality,
            max_dimension=self.settings.max_dimension,
        )
        previews = await create_image_previews(compressed, self.previews)

        self.images = reflow_images([*self.images, *previews])
        self.field_errors.pop(IMAGES_FIELD, None)

        added_ids = {preview.id for preview in previews}
        added = [img for img in self.images if img.id in added_ids]
        logger.debug(f"Added {len(added)} image(s) to gallery ({len(self.images)} total)")
        return GalleryUpdate(
            ok=True, message=f"Added {len(added)} image(s)", added=added
        )

    def remove_image(self, image_id: str) -> GalleryUpdate:
        """Remove an image, releasing its preview handle if it has one."""
        removed = next((img for img in self.images if img.id == image_id), None)
        if removed is None:
            return GalleryUpdate(ok=False, message=f"Image {image_id} not found")

        if isinstance(removed, ImagePreview):
            cleanup_previews([removed], self.previews)

        self.images = reflow_images([img for img in self.images if img.id != image_id])
        self.field_errors.pop(IMAGES_FIELD, None)
        return GalleryUpdate(ok=True)

    def reorder(self, event: DragEndEvent) -> GalleryUpdate:
        """Apply a drag-end event. Unchanged positions are a no-op."""
        if not self.allow_reordering:
            return GalleryUpdate(ok=False, message="Reordering is disabled")

        destination = event.destination_index
        if destination is None or destination == event.source_index:
            return GalleryUpdate(ok=True)

        self.images = move_image(self.images, event.source_index, destination)
        return GalleryUpdate(ok=True)

    def pending_previews(self) -> list[ImagePreview]:
        """Images that have not been uploaded yet."""
        return [img for img in self.images if isinstance(img, ImagePreview)]

    def close(self) -> None:
        """Release every preview handle still held by the editor."""
        cleanup_previews(self.pending_previews(), self.previews)
