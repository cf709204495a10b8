"""Card-level maintenance endpoints."""

from fastapi import APIRouter, Query

from gallery.core.deps import DBSession
from gallery.schemas.card import MigrationStats
from gallery.workers.image_migration import BATCH_SIZE, ImageMigrationWorker

router = APIRouter()


@router.post("/migrate-images", response_model=MigrationStats)
async def migrate_legacy_images(
    user_id: str,
    db: DBSession,
    dry_run: bool = Query(True, alias="dryRun"),
    batch_size: int = Query(BATCH_SIZE, alias="batchSize", ge=1, le=1000),
) -> MigrationStats:
    """
    Migrate a user's legacy single-image cards to the multi-image shape.

    - **dryRun**: Only count what would change (default true)
    - **batchSize**: Cards per batch
    """
    worker = ImageMigrationWorker(user_id, batch_size=batch_size, dry_run=dry_run)
    return await worker.run(db)
