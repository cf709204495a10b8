"""Blob storage interface.

Each backend stores raw bytes under slash-separated paths such as
``users/{userId}/cards/{cardId}/{imageId}.jpg`` and resolves a durable
public URL for them.
"""

from typing import Protocol


class BlobStore(Protocol):
    """Protocol for blob storage backends.

    Missing objects raise ObjectNotFoundError; any other failure raises
    StorageError.
    """

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        """Write ``data`` under ``path``, replacing any existing object."""
        ...

    async def get_url(self, path: str) -> str:
        """Resolve the public URL of an existing object."""
        ...

    async def read(self, path: str) -> bytes:
        """Return the bytes stored under ``path``."""
        ...

    async def delete(self, path: str) -> None:
        """Remove the object stored under ``path``."""
        ...
