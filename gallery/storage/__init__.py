"""Blob storage backends."""

from gallery.core.config import Settings
from gallery.storage.base import BlobStore
from gallery.storage.http import HttpBlobStore
from gallery.storage.local import LocalBlobStore
from gallery.storage.memory import MemoryBlobStore


def create_blob_store(settings: Settings) -> BlobStore:
    """Build the blob store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return MemoryBlobStore(settings.public_base_url)
    if settings.storage_backend == "http":
        if not settings.storage_http_url:
            raise ValueError("STORAGE_HTTP_URL is required for the http storage backend")
        return HttpBlobStore(
            settings.storage_http_url,
            public_base_url=settings.public_base_url,
            token=settings.storage_http_token,
        )
    return LocalBlobStore(settings.storage_root, settings.public_base_url)


__all__ = [
    "BlobStore",
    "HttpBlobStore",
    "LocalBlobStore",
    "MemoryBlobStore",
    "create_blob_store",
]
