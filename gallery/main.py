"""
Card Gallery API - FastAPI Application

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from gallery.api import router as api_router
from gallery.core.config import get_settings
from gallery.core.logging import setup_logging
from gallery.db import models_registry  # noqa: F401 - Import to register models
from gallery.db.base import Base
from gallery.db.session import engine
from gallery.storage import HttpBlobStore, create_blob_store

settings = get_settings()


async def init_database() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings)
    logger.info("Starting Card Gallery API...")

    # Ensure data directories exist
    Path(settings.data_folder).mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "local":
        Path(settings.storage_root).mkdir(parents=True, exist_ok=True)

    await init_database()
    app.state.blob_store = create_blob_store(settings)
    logger.info(f"Blob storage backend: {settings.storage_backend}")

    logger.info(f"Card Gallery API started on port {settings.port}")

    yield

    # Shutdown
    logger.info("Shutting down Card Gallery API...")
    store = getattr(app.state, "blob_store", None)
    if isinstance(store, HttpBlobStore):
        await store.close()
    logger.info("Card Gallery API stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Card Gallery API - multi-image management for inventory cards",
    lifespan=lifespan,
    docs_url="/swagger" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"Code": 500, "Message": str(exc)},
    )


@app.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"name": settings.app_name, "version": settings.app_version}


# Include API router
app.include_router(api_router)


# Static file serving for locally stored blobs
if settings.storage_backend == "local":
    app.mount(
        "/blobs",
        StaticFiles(directory=settings.storage_root, check_dir=False),
        name="blobs",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gallery.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers,
    )
