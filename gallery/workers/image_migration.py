"""Legacy image migration worker.

Rewrites cards that still carry only the single ``imageUrl`` field into the
multi-image shape, one batch of cards at a time.
"""

from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.db.session import async_session_maker
from gallery.images.collection import migrate_legacy_image
from gallery.schemas.card import CardDocument, MigrationStats
from gallery.services.card_service import CardService

BATCH_SIZE = 250


class ImageMigrationWorker:
    """Worker migrating a user's cards from legacy single-image fields."""

    def __init__(self, user_id: str, batch_size: int = BATCH_SIZE, dry_run: bool = True):
        self.user_id = user_id
        self.batch_size = batch_size
        self.dry_run = dry_run

    @asynccontextmanager
    async def _session(self, db: AsyncSession | None):
        if db is not None:
            yield db
            return
        async with async_session_maker() as session:
            yield session

    async def run(self, db: AsyncSession | None = None) -> MigrationStats:
        """Run the migration and return its counters."""
        mode = "dry run" if self.dry_run else "live"
        logger.info(f"Starting legacy image migration for user {self.user_id} ({mode})")
        stats = MigrationStats(dry_run=self.dry_run)

        async with self._session(db) as session:
            card_service = CardService(session)
            offset = 0
            while True:
                cards = await card_service.get_user_cards(
                    self.user_id, offset=offset, limit=self.batch_size
                )
                if not cards:
                    break

                logger.info(
                    f"Processing batch {offset // self.batch_size + 1} "
                    f"({len(cards)} cards)"
                )
                batch_updates = 0
                for card in cards:
                    stats.docs_scanned += 1
                    try:
                        document = CardDocument.model_validate(card.to_document())
                        migrated = migrate_legacy_image(document)
                        if migrated.model_dump() == document.model_dump():
                            stats.docs_skipped += 1
                            continue

                        if not self.dry_run:
                            card_service.apply_document(card, migrated)
                            batch_updates += 1
                        stats.docs_updated += 1
                    except Exception as e:
                        logger.error(f"Error migrating card {card.id}: {e}")
                        stats.errors.append(f"{card.id}: {e}")

                if batch_updates:
                    await session.commit()

                offset += len(cards)

        logger.info(
            f"Legacy image migration finished: scanned {stats.docs_scanned}, "
            f"updated {stats.docs_updated}, skipped {stats.docs_skipped}, "
            f"errors {len(stats.errors)}"
        )
        return stats
