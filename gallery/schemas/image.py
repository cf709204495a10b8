"""Image metadata schemas."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from gallery.images.files import ImageFile


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class ImageRecord(BaseModel):
    """Persisted metadata for one image belonging to a card."""

    id: str
    url: str | None = None  # None until the upload completes
    filename: str
    size: int = 0
    type: Literal["image/jpeg", "image/png"] = "image/jpeg"
    order: int = Field(0, ge=0)
    is_primary: bool = Field(False, alias="isPrimary")
    upload_date: str = Field(default_factory=utc_now_iso, alias="uploadDate")
    caption: str = ""

    model_config = {"populate_by_name": True}


class ImagePreview(ImageRecord):
    """Not-yet-uploaded image with a revocable local display handle."""

    file: ImageFile = Field(exclude=True)
    preview_url: str = Field(alias="previewUrl")

    model_config = {"populate_by_name": True}


def create_image_metadata(
    id: str,
    url: str | None,
    filename: str,
    size: int,
    type: str,
    order: int = 0,
    is_primary: bool = False,
) -> ImageRecord:
    """Build an ImageRecord stamped with the current upload date."""
    return ImageRecord(
        id=id,
        url=url,
        filename=filename,
        size=size,
        type=type,
        order=order,
        is_primary=is_primary,
    )


class DeleteResult(BaseModel):
    """Per-id outcome of a best-effort batch delete."""

    successful: list[str] = []
    failed: list[str] = []


class ReorderRequest(BaseModel):
    """Move one image from one position to another."""

    from_index: int = Field(alias="fromIndex")
    to_index: int = Field(alias="toIndex")

    model_config = {"populate_by_name": True}


class ImagePatch(BaseModel):
    """Editable display fields of an image."""

    caption: str | None = None
    filename: str | None = None
