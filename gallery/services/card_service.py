"""Card service: reads cards and writes back their image fields."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.images.collection import normalize_card
from gallery.models.card import Card
from gallery.schemas.card import CardDocument, CardImagesDTO
from gallery.services.base_service import BaseService


class CardService(BaseService[Card]):
    """Card access limited to the image fields."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Card)

    async def get_card(self, user_id: str, card_id: str) -> Card | None:
        """Get a card owned by ``user_id``."""
        card = await self.get_by_id(card_id)
        if not card or card.user_id != user_id:
            return None
        return card

    async def get_user_cards(
        self, user_id: str, offset: int = 0, limit: int = 250
    ) -> list[Card]:
        """Get one page of a user's cards ordered by id."""
        result = await self.db.execute(
            select(Card)
            .where(Card.user_id == user_id)
            .order_by(Card.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_document(self, user_id: str, card_id: str) -> CardDocument | None:
        """Get a card as a document in the multi-image shape."""
        card = await self.get_card(user_id, card_id)
        if not card:
            return None
        return normalize_card(card.to_document())

    def apply_document(self, card: Card, document: CardDocument) -> None:
        """Copy the image fields of ``document`` onto the row without committing."""
        card.set_images(
            [img.model_dump(by_alias=True) for img in document.images]
        )
        card.image_count = document.image_count
        card.primary_image_id = document.primary_image_id
        card.primary_image_url = document.primary_image_url
        card.image_url = document.image_url
        card.has_image = document.has_image

    async def save_images(self, card: Card, document: CardDocument) -> CardDocument:
        """Persist the image fields of ``document``. Last write wins."""
        self.apply_document(card, document)
        await self.update(card)
        return document

    @staticmethod
    def to_images_dto(document: CardDocument) -> CardImagesDTO:
        """Convert a card document to the image response schema."""
        return CardImagesDTO(
            id=document.id or "",
            images=document.images,
            image_count=document.image_count,
            primary_image_id=document.primary_image_id,
            primary_image_url=document.primary_image_url,
            image_url=document.image_url,
            has_image=document.has_image,
        )
