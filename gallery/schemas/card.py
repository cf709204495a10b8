"""Card document schemas (image fields of the parent entity)."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from gallery.schemas.image import ImageRecord


class CardDocument(BaseModel):
    """A card document as stored by the card collaborator.

    Only the image fields are owned here; every other document field is
    carried through untouched.
    """

    id: str | None = None
    user_id: str | None = Field(None, alias="userId")
    card_name: str | None = Field(None, alias="cardName")
    collection: str | None = None

    # Multiple image fields
    images: list[ImageRecord] = []
    image_count: int = Field(0, alias="imageCount")
    primary_image_id: str | None = Field(None, alias="primaryImageId")
    primary_image_url: str | None = Field(None, alias="primaryImageUrl")

    # Legacy single image fields
    image_url: str | None = Field(None, alias="imageUrl")
    has_image: bool = Field(False, alias="hasImage")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("collection", mode="before")
    @classmethod
    def collection_name(cls, v: Any) -> Any:
        """Accept a collection object and keep its name (or id)."""
        if isinstance(v, dict):
            return v.get("name") or v.get("id")
        return v

    @field_validator("images", mode="before")
    @classmethod
    def images_or_empty(cls, v: Any) -> Any:
        """Treat a missing images array as empty."""
        return [] if v is None else v


class CardImagesDTO(BaseModel):
    """Image fields of a card returned by the API."""

    id: str
    images: list[ImageRecord] = []
    image_count: int = Field(0, alias="imageCount")
    primary_image_id: str | None = Field(None, alias="primaryImageId")
    primary_image_url: str | None = Field(None, alias="primaryImageUrl")
    image_url: str | None = Field(None, alias="imageUrl")
    has_image: bool = Field(False, alias="hasImage")

    model_config = {"populate_by_name": True}


class StructureReport(BaseModel):
    """Result of a structural check of a card document."""

    is_valid: bool = Field(alias="isValid")
    errors: list[str] = []

    model_config = {"populate_by_name": True}


class MigrationStats(BaseModel):
    """Counters from a legacy image migration run."""

    docs_scanned: int = Field(0, alias="docsScanned")
    docs_updated: int = Field(0, alias="docsUpdated")
    docs_skipped: int = Field(0, alias="docsSkipped")
    errors: list[str] = []
    dry_run: bool = Field(True, alias="dryRun")

    model_config = {"populate_by_name": True}
