"""Image upload service: moves card images to and from blob storage."""

import asyncio
from collections.abc import Sequence

from loguru import logger

from gallery.core.config import Settings, get_settings
from gallery.core.exceptions import (
    ImageLimitError,
    ImageValidationError,
    ObjectNotFoundError,
    UploadError,
)
from gallery.images.compression import ProgressCallback, compress_multiple_images
from gallery.images.files import ImageFile, generate_image_id
from gallery.images.validation import validate_multiple_images
from gallery.schemas.image import DeleteResult, ImageRecord, create_image_metadata
from gallery.storage.base import BlobStore


def get_image_storage_path(user_id: str, card_id: str, image_id: str) -> str:
    """Storage path of a card image.

    Every image is stored under a ``.jpg`` name whatever its real format;
    existing stored data depends on this.
    """
    return f"users/{user_id}/cards/{card_id}/{image_id}.jpg"


class ImageUploadService:
    """Upload, delete and replace card images in blob storage.

    Uploads are fail-fast: if any file in a batch fails, the whole call
    raises and no records are returned. Batch deletes are best-effort and
    report per-id outcomes instead of raising.
    """

    def __init__(self, store: BlobStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    async def upload_multiple_images(
        self,
        files: Sequence[ImageFile],
        user_id: str,
        card_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[ImageRecord]:
        """Validate, compress and upload a batch of files.

        Compression reports progress from 0 to 0.5 and uploads from 0.5 to
        1.0. Records come back in input order with the first one primary.

        Raises:
            ImageValidationError: The batch failed validation.
            UploadError: Any single upload failed.
        """
        if not files:
            return []

        if not user_id or not card_id:
            raise ValueError("User ID and Card ID are required for image upload")

        logger.debug(f"Starting multiple image upload for user {user_id}, card {card_id}")

        validation = validate_multiple_images(
            files,
            max_images=self.settings.max_images_per_card,
            max_file_size=self.settings.max_file_size,
            allowed_formats=self.settings.allowed_formats,
        )
        if not validation.is_valid:
            raise ImageValidationError(validation.errors)

        def compression_progress(progress: float) -> None:
            if on_progress:
                on_progress(progress * 0.5)

        compressed = await compress_multiple_images(
            validation.valid_files,
            compression_progress,
            quality=self.settings.compression_quality,
            max_dimension=self.settings.max_dimension,
        )

        total = len(compressed)
        done = 0

        async def upload_one(file: ImageFile, index: int) -> ImageRecord:
            nonlocal done
            image_id = generate_image_id()
            path = get_image_storage_path(user_id, card_id, image_id)
            try:
                await self.store.put(path, file.data, file.content_type)
                url = await self.store.get_url(path)
            except Exception as e:
                logger.error(f"Error uploading image {index + 1}: {e}")
                raise UploadError(f"Failed to upload image {index + 1}: {e}") from e

            done += 1
            if on_progress and done < total:
                on_progress(0.5 + 0.5 * done / total)

            logger.debug(f"Image {index + 1} uploaded successfully: {image_id}")
            return create_image_metadata(
                image_id,
                url,
                file.name,
                file.size,
                file.content_type,
                index,
                index == 0,
            )

        # gather keeps results in argument order, not completion order
        records = await asyncio.gather(
            *(upload_one(file, index) for index, file in enumerate(compressed))
        )

        if on_progress:
            on_progress(1.0)

        logger.debug(f"Successfully uploaded {len(records)} images for card {card_id}")
        return list(records)

    async def upload_single_image(
        self, file: ImageFile, user_id: str, card_id: str
    ) -> ImageRecord:
        """Upload one file through the batch pipeline."""
        if file is None:
            raise ValueError("File is required for image upload")

        records = await self.upload_multiple_images([file], user_id, card_id)
        if not records:
            raise UploadError("No images were uploaded")
        return records[0]

    async def delete_image(self, user_id: str, card_id: str, image_id: str) -> bool:
        """Delete one stored image. A missing object counts as deleted."""
        if not user_id or not card_id or not image_id:
            raise ValueError("User ID, Card ID, and Image ID are required for deletion")

        path = get_image_storage_path(user_id, card_id, image_id)
        try:
            await self.store.delete(path)
        except ObjectNotFoundError:
            logger.debug(f"Image {image_id} not found, considering deletion successful")
            return True

        logger.debug(f"Image deleted successfully: {image_id}")
        return True

    async def delete_multiple_images(
        self, user_id: str, card_id: str, image_ids: Sequence[str]
    ) -> DeleteResult:
        """Delete several images, collecting per-id success and failure."""
        if not user_id or not card_id or image_ids is None:
            raise ValueError(
                "User ID, Card ID, and Image IDs array are required for deletion"
            )

        outcomes = await asyncio.gather(
            *(self.delete_image(user_id, card_id, image_id) for image_id in image_ids),
            return_exceptions=True,
        )

        result = DeleteResult()
        for image_id, outcome in zip(image_ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Failed to delete image {image_id}: {outcome}")
                result.failed.append(image_id)
            else:
                result.successful.append(image_id)
        return result

    async def replace_all_images(
        self,
        new_files: Sequence[ImageFile],
        user_id: str,
        card_id: str,
        old_image_ids: Sequence[str] = (),
        on_progress: ProgressCallback | None = None,
    ) -> list[ImageRecord]:
        """Delete the old images, then upload the new ones.

        The upload runs even if some deletes failed; those blobs are left
        behind.
        """
        if not user_id or not card_id:
            raise ValueError("User ID and Card ID are required for image replacement")

        logger.debug(
            f"Replacing images for card {card_id}: "
            f"{len(old_image_ids)} old, {len(new_files)} new"
        )

        if old_image_ids:
            deleted = await self.delete_multiple_images(user_id, card_id, old_image_ids)
            if deleted.failed:
                logger.warning(
                    f"{len(deleted.failed)} old image(s) of card {card_id} "
                    f"could not be deleted: {deleted.failed}"
                )

        records = await self.upload_multiple_images(new_files, user_id, card_id, on_progress)
        logger.debug(f"Successfully replaced images for card {card_id}")
        return records

    async def upload_and_append_images(
        self,
        new_files: Sequence[ImageFile],
        user_id: str,
        card_id: str,
        existing_images: Sequence[ImageRecord] = (),
        on_progress: ProgressCallback | None = None,
    ) -> list[ImageRecord]:
        """Upload new files and append them after the existing images.

        New records are numbered from ``len(existing_images)``. A new record
        is primary only when the card had no images, so an existing primary
        keeps its flag. Returns existing + new records.

        Raises:
            ImageLimitError: The card would exceed the image ceiling.
        """
        if not user_id or not card_id:
            raise ValueError("User ID and Card ID are required for adding images")

        max_images = self.settings.max_images_per_card
        if len(existing_images) + len(new_files) > max_images:
            raise ImageLimitError(len(new_files), len(existing_images), max_images)

        logger.debug(
            f"Adding {len(new_files)} images to card {card_id} "
            f"(currently has {len(existing_images)})"
        )

        uploaded = await self.upload_multiple_images(new_files, user_id, card_id, on_progress)

        start = len(existing_images)
        appended = [
            record.model_copy(
                update={
                    "order": start + index,
                    "is_primary": start == 0 and index == 0,
                }
            )
            for index, record in enumerate(uploaded)
        ]

        logger.debug(f"Successfully added {len(appended)} images to card {card_id}")
        return [*existing_images, *appended]

    async def image_exists(self, user_id: str, card_id: str, image_id: str) -> bool:
        """Whether a stored object backs the image."""
        try:
            await self.store.get_url(get_image_storage_path(user_id, card_id, image_id))
        except ObjectNotFoundError:
            return False
        return True

    async def get_image_download_url(self, user_id: str, card_id: str, image_id: str) -> str:
        """Resolve the public URL of a stored image."""
        try:
            return await self.store.get_url(
                get_image_storage_path(user_id, card_id, image_id)
            )
        except Exception as e:
            logger.error(f"Error getting download URL for image {image_id}: {e}")
            raise
