"""Format, size and count checks for candidate image files."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from gallery.images.files import ImageFile

MAX_IMAGES_PER_CARD = 5
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MiB
ALLOWED_FORMATS = ("image/jpeg", "image/png")


@dataclass
class ValidationResult:
    """Outcome of validating one file."""

    is_valid: bool
    error: str | None = None


@dataclass
class BatchValidationResult:
    """Outcome of validating a batch.

    ``is_valid`` is all-or-nothing: a single bad file fails the batch even
    though ``valid_files`` still lists the good ones. Gate on ``is_valid``.
    """

    is_valid: bool
    valid_files: list[ImageFile] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def validate_image_file(
    file: ImageFile | None,
    *,
    max_file_size: int = MAX_FILE_SIZE,
    allowed_formats: Sequence[str] = ALLOWED_FORMATS,
) -> ValidationResult:
    """Validate a single image file against the format and size policy."""
    if file is None:
        return ValidationResult(False, "No file provided")

    if file.content_type not in allowed_formats:
        return ValidationResult(False, "Only JPEG and PNG files are allowed")

    if file.size > max_file_size:
        max_size_mb = max_file_size / (1024 * 1024)
        return ValidationResult(
            False, f"File size must be less than {max_size_mb:g}MB"
        )

    return ValidationResult(True)


def validate_multiple_images(
    files: Sequence[ImageFile | None],
    *,
    max_images: int = MAX_IMAGES_PER_CARD,
    max_file_size: int = MAX_FILE_SIZE,
    allowed_formats: Sequence[str] = ALLOWED_FORMATS,
) -> BatchValidationResult:
    """Validate a batch of image files.

    Batches larger than ``max_images`` are rejected before any per-file
    check and return no valid files. Errors are 1-indexed: ``File 2: ...``.
    """
    files = list(files)

    if len(files) > max_images:
        return BatchValidationResult(
            False, [], [f"Maximum {max_images} images allowed per card"]
        )

    valid_files: list[ImageFile] = []
    errors: list[str] = []
    for index, file in enumerate(files, start=1):
        result = validate_image_file(
            file, max_file_size=max_file_size, allowed_formats=allowed_formats
        )
        if result.is_valid:
            valid_files.append(file)
        else:
            errors.append(f"File {index}: {result.error}")

    return BatchValidationResult(
        is_valid=len(valid_files) > 0 and len(errors) == 0,
        valid_files=valid_files,
        errors=errors,
    )
