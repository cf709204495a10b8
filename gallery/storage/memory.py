"""Dict-backed blob store for development and tests."""

from gallery.core.exceptions import ObjectNotFoundError


class MemoryBlobStore:
    """Keeps objects in process memory."""

    def __init__(self, public_base_url: str = "memory://blobs"):
        self.public_base_url = public_base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        self.objects[path] = (data, content_type)

    async def get_url(self, path: str) -> str:
        if path not in self.objects:
            raise ObjectNotFoundError(path)
        return f"{self.public_base_url}/{path}"

    async def read(self, path: str) -> bytes:
        try:
            return self.objects[path][0]
        except KeyError:
            raise ObjectNotFoundError(path) from None

    async def delete(self, path: str) -> None:
        if self.objects.pop(path, None) is None:
            raise ObjectNotFoundError(path)
