"""FastAPI dependencies for dependency injection."""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gallery.core.config import Settings, get_settings
from gallery.db.session import async_session_maker
from gallery.storage import create_blob_store
from gallery.storage.base import BlobStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def get_blob_store(request: Request) -> BlobStore:
    """Get the blob store created at startup, or build one from settings."""
    store = getattr(request.app.state, "blob_store", None)
    if store is None:
        store = create_blob_store(get_settings())
        request.app.state.blob_store = store
    return store


# Type aliases for cleaner dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
Storage = Annotated[BlobStore, Depends(get_blob_store)]
AppSettings = Annotated[Settings, Depends(get_settings)]
