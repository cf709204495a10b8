"""Tests for image file validation."""

from conftest import make_jpeg, make_png

from gallery.images.files import ImageFile
from gallery.images.validation import (
    MAX_FILE_SIZE,
    validate_image_file,
    validate_multiple_images,
)


def oversized(name: str = "huge.jpg") -> ImageFile:
    return ImageFile(name=name, content_type="image/jpeg", data=b"\0" * (MAX_FILE_SIZE + 1))


def test_validate_jpeg_and_png():
    """JPEG and PNG files within the size limit are valid."""
    assert validate_image_file(make_jpeg()).is_valid
    assert validate_image_file(make_png()).is_valid


def test_validate_rejects_other_formats():
    """Only the two allowed MIME types pass."""
    gif = ImageFile(name="anim.gif", content_type="image/gif", data=b"GIF89a")

    result = validate_image_file(gif)

    assert result.is_valid is False
    assert result.error == "Only JPEG and PNG files are allowed"


def test_validate_size_limit():
    """A file one byte over 50 MiB is rejected; exactly 50 MiB passes."""
    at_limit = ImageFile(name="ok.jpg", content_type="image/jpeg", data=b"\0" * MAX_FILE_SIZE)

    assert validate_image_file(at_limit).is_valid
    result = validate_image_file(oversized())
    assert result.is_valid is False
    assert result.error == "File size must be less than 50MB"


def test_validate_missing_file():
    """None is reported, not raised."""
    result = validate_image_file(None)
    assert result.is_valid is False
    assert result.error == "No file provided"


def test_batch_one_bad_file_fails_whole_batch():
    """One oversized file fails the batch while the other two are still listed."""
    files = [make_jpeg("a.jpg"), oversized("b.jpg"), make_png("c.png")]

    result = validate_multiple_images(files)

    assert result.is_valid is False
    assert len(result.errors) == 1
    assert len(result.valid_files) == 2
    assert result.errors[0].startswith("File 2: ")


def test_batch_too_many_files():
    """More than five files are rejected before any per-file check."""
    files = [make_jpeg(f"{i}.jpg", 8, 8) for i in range(6)]

    result = validate_multiple_images(files)

    assert result.is_valid is False
    assert result.valid_files == []
    assert result.errors == ["Maximum 5 images allowed per card"]


def test_batch_empty_is_invalid():
    """An empty batch has no valid file and is therefore invalid."""
    result = validate_multiple_images([])

    assert result.is_valid is False
    assert result.errors == []


def test_batch_all_valid():
    files = [make_jpeg("a.jpg", 8, 8), make_png("b.png", 8, 8)]

    result = validate_multiple_images(files)

    assert result.is_valid is True
    assert result.valid_files == files
    assert result.errors == []
