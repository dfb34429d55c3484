"""Resolve stored photo references to bytes."""

import logging
from dataclasses import dataclass

import httpx

from registration_desk.services.exports import PhotoFetcher
from registration_desk.services.images import from_data_url

logger = logging.getLogger(__name__)


@dataclass
class HttpxPhotoFetcher(PhotoFetcher):
    """Photo fetcher using httpx for remote URLs."""

    http_client: httpx.AsyncClient
    timeout_seconds: int = 10

    @classmethod
    def create(cls, timeout_seconds: int = 10) -> "HttpxPhotoFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout_seconds=timeout_seconds)

    async def fetch(self, photo_url: str) -> bytes | None:
        """Return photo bytes; unavailable photos are logged and skipped."""
        if photo_url.startswith("data:"):
            return from_data_url(photo_url)
        try:
            response = await self.http_client.get(
                photo_url, timeout=self.timeout_seconds, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPError:
            logger.warning("Failed to fetch photo", extra={"photo_url": photo_url})
            return None
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
