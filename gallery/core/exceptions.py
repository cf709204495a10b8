"""Exception types raised by the image pipeline."""


class GalleryError(Exception):
    """Base class for image pipeline errors."""


class ImageValidationError(GalleryError):
    """A batch failed validation on the upload path."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")


class ImageLimitError(GalleryError):
    """Adding the files would push a card over its image ceiling."""

    def __init__(self, adding: int, existing: int, max_images: int):
        self.adding = adding
        self.existing = existing
        self.max_images = max_images
        super().__init__(
            f"Cannot add {adding} images. Maximum {max_images} images allowed "
            f"per card (currently has {existing})"
        )


class ImageIndexError(GalleryError, IndexError):
    """Reorder index outside the image list."""


class CompressionError(GalleryError):
    """An image could not be decoded or re-encoded."""


class StorageError(GalleryError):
    """Blob storage operation failed."""


class ObjectNotFoundError(StorageError):
    """No object stored under the requested path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Object not found: {path}")


class UploadError(GalleryError):
    """A single file upload failed; fails the whole batch."""
