"""Card model holding the image fields of an inventory card."""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from gallery.db.base import Base


class Card(Base):
    """Card database model.

    Rows are created by the card collaborator; this service reads them and
    writes back the image fields only.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    collection: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Image list stored as JSON
    images: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_count: Mapped[int] = mapped_column(Integer, default=0)
    primary_image_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    primary_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Legacy single image fields
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    has_image: Mapped[bool] = mapped_column(Boolean, default=False)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, server_default=func.now(), onupdate=func.now()
    )

    def get_images(self) -> list[dict[str, Any]] | None:
        """Deserialize the image list JSON; None when never populated."""
        if not self.images:
            return None
        try:
            return json.loads(self.images)
        except json.JSONDecodeError:
            return None

    def set_images(self, images: list[dict[str, Any]]) -> None:
        """Serialize the image list to JSON."""
        self.images = json.dumps(images)

    def to_document(self) -> dict[str, Any]:
        """Raw card document in the stored camelCase shape."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "cardName": self.card_name,
            "collection": self.collection,
            "images": self.get_images(),
            "imageCount": self.image_count,
            "primaryImageId": self.primary_image_id,
            "primaryImageUrl": self.primary_image_url,
            "imageUrl": self.image_url,
            "hasImage": self.has_image,
        }
