"""Pure operations over a card's ordered image list.

Every function takes a card (or list) and returns a new one; nothing is
mutated in place. Add, remove and reorder reflow the whole list so that
``order`` matches list position and only position 0 is primary. The shadow
fields (``imageCount``, ``primaryImageId``, ``primaryImageUrl``, legacy
``imageUrl``/``hasImage``) are recomputed after every change.
"""

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from gallery.core.exceptions import ImageIndexError, ImageLimitError
from gallery.images.files import generate_image_id
from gallery.images.validation import MAX_IMAGES_PER_CARD
from gallery.schemas.card import CardDocument, StructureReport
from gallery.schemas.image import ImageRecord, create_image_metadata

RecordT = TypeVar("RecordT", bound=ImageRecord)


def reflow_images(images: Sequence[RecordT]) -> list[RecordT]:
    """Renumber ``order`` by position and make position 0 the only primary."""
    return [
        img.model_copy(update={"order": index, "is_primary": index == 0})
        for index, img in enumerate(images)
    ]


def move_image(images: Sequence[RecordT], from_index: int, to_index: int) -> list[RecordT]:
    """Move one element from ``from_index`` to ``to_index`` and reflow.

    Raises ImageIndexError when either index is outside the list.
    """
    size = len(images)
    for name, index in (("fromIndex", from_index), ("toIndex", to_index)):
        if not 0 <= index < size:
            raise ImageIndexError(
                f"{name} {index} out of range for {size} image(s)"
            )

    result = list(images)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return reflow_images(result)


def with_image_list(card: CardDocument, images: Sequence[ImageRecord]) -> CardDocument:
    """Swap in ``images`` and recompute the shadow fields.

    The primary is whichever record is flagged; the list is not reflowed.
    """
    images = list(images)
    primary = next((img for img in images if img.is_primary), None)
    return card.model_copy(
        update={
            "images": images,
            "image_count": len(images),
            "primary_image_id": primary.id if primary else None,
            "primary_image_url": primary.url if primary else None,
            "has_image": len(images) > 0,
            "image_url": primary.url if primary else None,
        }
    )


def add_images_to_card(
    card: CardDocument,
    new_images: Sequence[ImageRecord],
    *,
    max_images: int = MAX_IMAGES_PER_CARD,
) -> CardDocument:
    """Append records and reflow the whole list.

    Raises ImageLimitError when the card would hold more than ``max_images``.
    """
    if len(card.images) + len(new_images) > max_images:
        raise ImageLimitError(len(new_images), len(card.images), max_images)
    return with_image_list(card, reflow_images([*card.images, *new_images]))


# The storage-aware add lives in ImageUploadService.upload_and_append_images
merge_images = add_images_to_card


def remove_image_from_card(card: CardDocument, image_id: str) -> CardDocument:
    """Drop the record with ``image_id`` and reflow the remainder."""
    if not card.images:
        return card
    remaining = [img for img in card.images if img.id != image_id]
    return with_image_list(card, reflow_images(remaining))


def reorder_card_images(card: CardDocument, from_index: int, to_index: int) -> CardDocument:
    """Move one image to a new position; equal indices are a no-op."""
    if from_index == to_index:
        return card
    return with_image_list(card, move_image(card.images, from_index, to_index))


def update_image_in_card(
    card: CardDocument, image_id: str, patch: Mapping[str, Any]
) -> CardDocument:
    """Merge ``patch`` into one record without touching the others.

    Primary-derived shadow fields follow whichever record is flagged primary
    afterwards. Ordering is not corrected: flipping ``is_primary`` here can
    leave a primary away from position 0.
    """
    if not card.images:
        return card

    images = []
    for img in card.images:
        if img.id == image_id:
            img = img.model_copy(update=_field_names(type(img), patch))
        images.append(img)
    return with_image_list(card, images)


def _field_names(model: type[ImageRecord], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Translate camelCase aliases in a patch to attribute names."""
    aliases = {
        info.alias: name for name, info in model.model_fields.items() if info.alias
    }
    return {aliases.get(key, key): value for key, value in patch.items()}


def get_primary_image(card: CardDocument) -> ImageRecord | None:
    """Return the flagged primary image, else the first one, else None."""
    if not card.images:
        return None
    return next((img for img in card.images if img.is_primary), card.images[0])


def get_all_images(card: CardDocument) -> list[ImageRecord]:
    """Return the images sorted by ``order``."""
    return sorted(card.images, key=lambda img: img.order)


def migrate_legacy_image(card: CardDocument) -> CardDocument:
    """Promote a legacy single ``imageUrl`` into a one-element image list.

    A card whose ``images`` is already populated is returned unchanged, so
    running the migration twice is the same as running it once.
    """
    if card.images:
        return card

    if card.image_url:
        record = create_image_metadata(
            generate_image_id(),
            card.image_url,
            "image.jpg",
            0,
            "image/jpeg",
            0,
            True,
        )
        return card.model_copy(
            update={
                "images": [record],
                "image_count": 1,
                "primary_image_id": record.id,
                "primary_image_url": card.image_url,
                "has_image": True,
            }
        )

    return card.model_copy(
        update={
            "images": [],
            "image_count": 0,
            "primary_image_id": None,
            "primary_image_url": None,
            "has_image": False,
        }
    )


def normalize_card(raw: Mapping[str, Any]) -> CardDocument:
    """Validate a raw card document and bring it to the multi-image shape."""
    return migrate_legacy_image(CardDocument.model_validate(dict(raw)))


def validate_card_structure(
    card: Mapping[str, Any] | None, max_images: int = MAX_IMAGES_PER_CARD
) -> StructureReport:
    """Check a raw card document for structural consistency.

    Diagnostic only; nothing on the write path calls this.
    """
    errors: list[str] = []

    if card is None:
        return StructureReport(is_valid=False, errors=["Card object is required"])

    if not card.get("cardName") or not isinstance(card.get("cardName"), str):
        errors.append("Card name is required and must be a string")

    if not card.get("collection") or not isinstance(card.get("collection"), str):
        errors.append("Collection is required and must be a string")

    images = card.get("images")
    if images is not None:
        if not isinstance(images, list):
            errors.append("Images must be an array")
        else:
            if len(images) > max_images:
                errors.append(f"Maximum {max_images} images allowed per card")

            if card.get("imageCount") != len(images):
                errors.append("Image count does not match images array length")

            primary_id = card.get("primaryImageId")
            if images and primary_id:
                if not any(
                    isinstance(img, Mapping) and img.get("id") == primary_id
                    for img in images
                ):
                    errors.append("Primary image ID does not match any image in the array")

    return StructureReport(is_valid=len(errors) == 0, errors=errors)
