"""Filesystem blob store served through the app's static mount."""

import asyncio
from pathlib import Path

from loguru import logger

from gallery.core.exceptions import ObjectNotFoundError, StorageError


class LocalBlobStore:
    """Stores objects as files under a root directory."""

    def __init__(self, root: str | Path, public_base_url: str):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        """Map a storage path to a file, refusing paths that escape the root."""
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root):
            raise StorageError(f"Invalid storage path: {path}")
        return target

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Stored {len(data)} bytes at {target}")

    async def get_url(self, path: str) -> str:
        target = self._resolve(path)
        if not await asyncio.to_thread(target.is_file):
            raise ObjectNotFoundError(path)
        return f"{self.public_base_url}/{path}"

    async def read(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError:
            raise ObjectNotFoundError(path) from None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            raise ObjectNotFoundError(path) from None
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e
