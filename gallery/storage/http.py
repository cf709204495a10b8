"""Remote object store reached over HTTP."""

import httpx
from loguru import logger

from gallery.core.exceptions import ObjectNotFoundError, StorageError


class HttpBlobStore:
    """Object store exposing PUT/HEAD/GET/DELETE on ``{base_url}/{path}``."""

    def __init__(
        self,
        base_url: str,
        public_base_url: str | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.public_base_url = (public_base_url or base_url).rstrip("/")
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(30.0),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"{method} {url} failed: {e}") from e

        if response.status_code == 404:
            raise ObjectNotFoundError(path)
        if response.is_error:
            raise StorageError(f"{method} {url} returned {response.status_code}")
        return response

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        await self._request(
            "PUT", path, content=data, headers={"Content-Type": content_type}
        )
        logger.debug(f"Uploaded {len(data)} bytes to {path}")

    async def get_url(self, path: str) -> str:
        await self._request("HEAD", path)
        return f"{self.public_base_url}/{path}"

    async def read(self, path: str) -> bytes:
        response = await self._request("GET", path)
        return response.content

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)
