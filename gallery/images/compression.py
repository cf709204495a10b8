"""Downsample and re-encode images with Pillow."""

import asyncio
import io
from collections.abc import Callable, Sequence

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from gallery.core.exceptions import CompressionError
from gallery.images.files import ImageFile, now_ms

COMPRESSION_QUALITY = 0.8
MAX_DIMENSION = 2048

# MIME type -> Pillow encoder name
_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
}

ProgressCallback = Callable[[float], None]


def fit_within(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> tuple[int, int]:
    """Scale (width, height) down to fit a max_dimension box, keeping aspect ratio.

    Never upscales.
    """
    if width > max_dimension or height > max_dimension:
        ratio = min(max_dimension / width, max_dimension / height)
        width = round(width * ratio)
        height = round(height * ratio)
    return width, height


def _encode(file: ImageFile, quality: float, max_dimension: int) -> bytes:
    """Decode, resize and re-encode into the file's own format."""
    encoder = _FORMATS.get(file.content_type)
    if encoder is None:
        raise CompressionError(f"Unsupported image type: {file.content_type}")

    try:
        img = Image.open(io.BytesIO(file.data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise CompressionError(f"Failed to load image for compression: {e}") from e

    try:
        # Apply EXIF rotation; the re-encoded file carries no orientation tag
        img = ImageOps.exif_transpose(img)
        size = fit_within(img.width, img.height, max_dimension)
        if size != (img.width, img.height):
            img = img.resize(size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        if encoder == "JPEG":
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            img.save(buffer, format="JPEG", quality=int(round(quality * 100)))
        else:
            img.save(buffer, format="PNG", optimize=True)
        return buffer.getvalue()
    except (OSError, ValueError) as e:
        raise CompressionError(f"Failed to compress image: {e}") from e


async def compress_image(
    file: ImageFile,
    quality: float = COMPRESSION_QUALITY,
    *,
    max_dimension: int = MAX_DIMENSION,
) -> ImageFile:
    """Compress one image.

    The result keeps the original name and MIME type and gets a fresh
    modification timestamp. Raises CompressionError on decode or encode
    failure.
    """
    data = await asyncio.to_thread(_encode, file, quality, max_dimension)
    return ImageFile(
        name=file.name,
        content_type=file.content_type,
        data=data,
        last_modified=now_ms(),
    )


async def compress_multiple_images(
    files: Sequence[ImageFile],
    on_progress: ProgressCallback | None = None,
    *,
    quality: float = COMPRESSION_QUALITY,
    max_dimension: int = MAX_DIMENSION,
) -> list[ImageFile]:
    """Compress files one after another, preserving order.

    A file that fails to compress is passed through unchanged, so the
    output always has the same length as the input.
    """
    compressed: list[ImageFile] = []
    total = len(files)

    for i, file in enumerate(files):
        try:
            compressed.append(
                await compress_image(file, quality, max_dimension=max_dimension)
            )
        except CompressionError as e:
            logger.error(f"Error compressing image {i + 1}: {e}")
            compressed.append(file)

        if on_progress:
            on_progress((i + 1) / total)

    return compressed
