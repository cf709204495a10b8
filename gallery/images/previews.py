"""Local display handles for images that have not been uploaded yet."""

import uuid
from collections.abc import Iterable, Sequence

from loguru import logger

from gallery.images.files import ImageFile, generate_image_id
from gallery.schemas.image import ImagePreview

BLOB_SCHEME = "blob:"


class PreviewRegistry:
    """Table of live preview handles.

    Each handle keeps its file alive until revoked; handles that are never
    revoked leak their bytes for the life of the registry.
    """

    def __init__(self):
        self._files: dict[str, ImageFile] = {}

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, handle: object) -> bool:
        return handle in self._files

    def create(self, file: ImageFile) -> str:
        """Register ``file`` and return a new ``blob:`` handle for it."""
        handle = f"{BLOB_SCHEME}{uuid.uuid4()}"
        self._files[handle] = file
        return handle

    def resolve(self, handle: str) -> ImageFile:
        """Return the file behind a live handle."""
        try:
            return self._files[handle]
        except KeyError:
            raise KeyError(f"Unknown or revoked preview handle: {handle}") from None

    def revoke(self, handle: str) -> None:
        """Release a handle. Revoking an unknown handle does nothing."""
        self._files.pop(handle, None)


async def create_image_previews(
    files: Sequence[ImageFile], registry: PreviewRegistry
) -> list[ImagePreview]:
    """Create a preview per file; the first one is primary."""
    previews = []
    for index, file in enumerate(files):
        previews.append(
            ImagePreview(
                id=generate_image_id(),
                file=file,
                preview_url=registry.create(file),
                filename=file.name,
                size=file.size,
                type=file.content_type,
                order=index,
                is_primary=index == 0,
            )
        )
    return previews


def cleanup_previews(previews: Iterable[ImagePreview], registry: PreviewRegistry) -> None:
    """Revoke every preview handle.

    Handles that are not ``blob:`` URLs are skipped. A failure on one preview
    is logged and the rest are still released; this never raises.
    """
    for preview in previews:
        url = getattr(preview, "preview_url", None)
        if not url or not url.startswith(BLOB_SCHEME):
            continue
        try:
            registry.revoke(url)
        except Exception as e:
            logger.warning(f"Failed to revoke preview URL {url}: {e}")
