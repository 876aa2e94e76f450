"""URL-based byte source.

Fetches image bytes over HTTP/HTTPS with httpx.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import httpx

from image_dimensions.config import HttpSettings
from image_dimensions.constants import READ_CHUNK_BYTES
from image_dimensions.exceptions import InvalidInputError, UrlAccessError
from image_dimensions.models import SourceType
from image_dimensions.sources import ByteStream, Fetcher, IteratorStream
from image_dimensions.validation import extension_of

logger = logging.getLogger("image_dimensions.sources")


def build_client(
    settings: HttpSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an httpx client honouring the configured timeouts."""
    return httpx.Client(
        timeout=httpx.Timeout(settings.timeout, connect=settings.connect_timeout),
        verify=settings.verify_ssl,
        follow_redirects=settings.follow_redirects,
        headers=dict(settings.headers),
        transport=transport,
    )


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class UrlFetcher(Fetcher):
    """Fetcher that reads from a URL through a caller-owned httpx client."""

    def __init__(self, url: str, client: httpx.Client) -> None:
        """Initialize the URL fetcher.

        Args:
            url: Validated http(s) URL
            client: Client whose lifetime covers every call on this fetcher
        """
        self.url = url
        self._client = client

    @property
    def source_type(self) -> SourceType:
        return SourceType.URL

    @property
    def identifier(self) -> str:
        return self.url

    @property
    def extension(self) -> str:
        return extension_of(self.url)

    def open_stream(self) -> ByteStream:
        try:
            request = self._client.build_request("GET", self.url)
        except httpx.InvalidURL as exc:
            raise InvalidInputError(
                f"Invalid URL provided: {self.url} ({exc})", source=self.url
            ) from exc

        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise UrlAccessError.could_not_open(self.url, str(exc)) from exc

        if response.is_error:
            response.close()
            raise UrlAccessError.could_not_open(
                self.url, f"HTTP {response.status_code}"
            )

        logger.debug("Streaming %s (HTTP %s)", self.url, response.status_code)
        return IteratorStream(
            self._iter_chunks(response),
            close=response.close,
            total_size=_content_length(response),
        )

    def _iter_chunks(self, response: httpx.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_bytes(READ_CHUNK_BYTES)
        except httpx.HTTPError as exc:
            raise UrlAccessError.could_not_open(self.url, str(exc)) from exc

    def fetch_full(self) -> bytes:
        try:
            response = self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UrlAccessError.could_not_download(
                self.url, f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UrlAccessError.could_not_download(self.url, str(exc)) from exc

        logger.debug("Downloaded %s bytes from %s", len(response.content), self.url)
        return response.content


__all__ = ["UrlFetcher", "build_client"]
