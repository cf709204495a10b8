"""Card image API endpoints."""

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from loguru import logger

from gallery.core.deps import AppSettings, DBSession, Storage
from gallery.core.exceptions import (
    ImageIndexError,
    ImageLimitError,
    ImageValidationError,
    StorageError,
    UploadError,
)
from gallery.images.collection import (
    normalize_card,
    remove_image_from_card,
    reorder_card_images,
    update_image_in_card,
    validate_card_structure,
    with_image_list,
)
from gallery.images.files import ImageFile
from gallery.images.validation import validate_multiple_images
from gallery.models.card import Card
from gallery.schemas.card import CardDocument, CardImagesDTO, StructureReport
from gallery.schemas.image import ImagePatch, ReorderRequest
from gallery.services.card_service import CardService
from gallery.services.image_upload_service import ImageUploadService

router = APIRouter()


async def _load(
    card_service: CardService, user_id: str, card_id: str
) -> tuple[Card, CardDocument]:
    card = await card_service.get_card(user_id, card_id)
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found",
        )
    document = normalize_card(card.to_document())
    if card.get_images() is None and document.images:
        # Persist the migrated legacy record so its id stays stable
        logger.info(f"Migrating legacy image of card {card.id} on first load")
        document = await card_service.save_images(card, document)
    return card, document


async def _read_files(files: list[UploadFile]) -> list[ImageFile]:
    image_files = []
    for upload in files:
        try:
            image_files.append(
                ImageFile(
                    name=upload.filename or "image",
                    content_type=upload.content_type or "",
                    data=await upload.read(),
                )
            )
        finally:
            await upload.close()
    return image_files


@router.get("", response_model=CardImagesDTO)
async def get_card_images(
    user_id: str,
    card_id: str,
    db: DBSession,
) -> CardImagesDTO:
    """
    Get the images of a card.

    Legacy single-image cards are returned in the multi-image shape.
    """
    card_service = CardService(db)
    _, document = await _load(card_service, user_id, card_id)
    return card_service.to_images_dto(document)


@router.post("", response_model=CardImagesDTO, status_code=status.HTTP_201_CREATED)
async def add_card_images(
    user_id: str,
    card_id: str,
    db: DBSession,
    store: Storage,
    settings: AppSettings,
    files: list[UploadFile] = File(...),
) -> CardImagesDTO:
    """
    Upload images and append them to a card.

    - **files**: JPEG or PNG files; the card may hold at most 5 images
    """
    card_service = CardService(db)
    card, document = await _load(card_service, user_id, card_id)

    upload_service = ImageUploadService(store, settings)
    try:
        images = await upload_service.upload_and_append_images(
            await _read_files(files), user_id, card_id, document.images
        )
    except ImageValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=", ".join(e.errors),
        )
    except ImageLimitError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except UploadError as e:
        logger.error(f"Failed to add images to card {card_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to add images",
        )

    document = await card_service.save_images(card, with_image_list(document, images))
    return card_service.to_images_dto(document)


@router.put("", response_model=CardImagesDTO)
async def replace_card_images(
    user_id: str,
    card_id: str,
    db: DBSession,
    store: Storage,
    settings: AppSettings,
    files: list[UploadFile] = File(...),
) -> CardImagesDTO:
    """
    Replace all images of a card.

    The new batch is validated before anything is deleted. Old blobs that
    fail to delete are left in storage.
    """
    card_service = CardService(db)
    card, document = await _load(card_service, user_id, card_id)

    image_files = await _read_files(files)
    validation = validate_multiple_images(
        image_files,
        max_images=settings.max_images_per_card,
        max_file_size=settings.max_file_size,
        allowed_formats=settings.allowed_formats,
    )
    if not validation.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=", ".join(validation.errors),
        )

    upload_service = ImageUploadService(store, settings)
    try:
        images = await upload_service.replace_all_images(
            image_files,
            user_id,
            card_id,
            [img.id for img in document.images],
        )
    except ImageValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=", ".join(e.errors),
        )
    except UploadError as e:
        logger.error(f"Failed to replace images of card {card_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to replace images",
        )

    document = await card_service.save_images(card, with_image_list(document, images))
    return card_service.to_images_dto(document)


@router.patch("/{image_id}", response_model=CardImagesDTO)
async def update_card_image(
    user_id: str,
    card_id: str,
    image_id: str,
    data: ImagePatch,
    db: DBSession,
) -> CardImagesDTO:
    """
    Update the caption or display filename of one image.
    """
    card_service = CardService(db)
    card, document = await _load(card_service, user_id, card_id)

    if not any(img.id == image_id for img in document.images):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    document = update_image_in_card(document, image_id, data.model_dump(exclude_unset=True, exclude_none=True))
    document = await card_service.save_images(card, document)
    return card_service.to_images_dto(document)


@router.delete("/{image_id}", response_model=CardImagesDTO)
async def delete_card_image(
    user_id: str,
    card_id: str,
    image_id: str,
    db: DBSession,
    store: Storage,
    settings: AppSettings,
) -> CardImagesDTO:
    """
    Delete one image from storage and from the card.

    The next image in line becomes primary.
    """
    card_service = CardService(db)
    card, document = await _load(card_service, user_id, card_id)

    if not any(img.id == image_id for img in document.images):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    upload_service = ImageUploadService(store, settings)
    try:
        await upload_service.delete_image(user_id, card_id, image_id)
    except StorageError as e:
        logger.error(f"Failed to delete image {image_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete image",
        )

    document = await card_service.save_images(card, remove_image_from_card(document, image_id))
    return card_service.to_images_dto(document)


@router.post("/reorder", response_model=CardImagesDTO)
async def reorder_images(
    user_id: str,
    card_id: str,
    data: ReorderRequest,
    db: DBSession,
) -> CardImagesDTO:
    """
    Move one image to a new position.

    - **fromIndex**: Current position (zero-based)
    - **toIndex**: New position (zero-based)
    """
    card_service = CardService(db)
    card, document = await _load(card_service, user_id, card_id)

    try:
        reordered = reorder_card_images(document, data.from_index, data.to_index)
    except ImageIndexError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    if reordered is not document:
        document = await card_service.save_images(card, reordered)
    return card_service.to_images_dto(document)


@router.get("/structure", response_model=StructureReport)
async def check_card_structure(
    user_id: str,
    card_id: str,
    db: DBSession,
    settings: AppSettings,
) -> StructureReport:
    """
    Check the stored card document for structural problems.
    """
    card_service = CardService(db)
    card = await card_service.get_card(user_id, card_id)
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found",
        )
    return validate_card_structure(card.to_document(), settings.max_images_per_card)
