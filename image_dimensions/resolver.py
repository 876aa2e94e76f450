"""Image dimension resolver.

Entry point tying validation, caching, fetching and format parsing together.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

import anyio
import httpx

from image_dimensions.cache import DimensionsCache, MemoryCache, build_cache_key
from image_dimensions.config import ResolverConfig
from image_dimensions.exceptions import (
    ImageDimensionsError,
    ImageNotFoundError,
    InvalidImageError,
    InvalidInputError,
    StorageAccessError,
)
from image_dimensions.fetch import FetchStrategy
from image_dimensions.formats import extract_dimensions
from image_dimensions.models import (
    Dimensions,
    LocalSource,
    Source,
    SourceType,
    StorageSource,
    UrlSource,
)
from image_dimensions.sources.storage import Disk, StorageFetcher
from image_dimensions.sources.url import UrlFetcher, build_client
from image_dimensions.validation import (
    extension_of,
    require_non_empty,
    require_url,
    resolve_local_path,
)

logger = logging.getLogger("image_dimensions.resolver")


class ImageDimensionsResolver:
    """Determine image dimensions from local files, URLs and storage disks.

    The resolver only holds read-only configuration and collaborators, so a
    single instance can serve concurrent callers.

    Example:
        resolver = ImageDimensionsResolver(disks={"media": LocalDisk("./media")})
        size = resolver.from_url("https://example.com/photo.jpg")
        print(size.width, size.height)
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        cache: DimensionsCache | None = None,
        disks: Mapping[str, Disk] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Resolver configuration (defaults apply when omitted)
            cache: Get-or-compute cache; an in-memory cache is used when
                caching is enabled and none is given
            disks: Storage disks addressable by name
            transport: Optional httpx transport for remote URLs
        """
        self.config = config or ResolverConfig()
        self.cache = cache if cache is not None else MemoryCache()
        self.disks: Mapping[str, Disk] = dict(disks or {})
        self._transport = transport
        self._strategy = FetchStrategy(self.config)

    def _cached(self, key: str, compute: Callable[[], Dimensions]) -> Dimensions:
        if not self.config.enable_cache:
            return compute()
        return self.cache.get_or_compute(key, self.config.cache_ttl, compute)

    def resolve(self, source: Source) -> Dimensions:
        """Resolve dimensions for any :data:`Source` descriptor."""
        if isinstance(source, LocalSource):
            return self.from_local(source.path)
        if isinstance(source, UrlSource):
            return self.from_url(source.url)
        if isinstance(source, StorageSource):
            return self.from_storage(source.disk_name, source.path)
        raise InvalidInputError(f"Unsupported source: {source!r}")

    def from_local(self, path: str | Path) -> Dimensions:
        """Get image dimensions from a local file.

        Raises:
            InvalidInputError: If the path is empty
            ImageNotFoundError: If the file does not exist
            InvalidImageError: If the file is unreadable, empty or not an image
        """
        resolved = resolve_local_path(str(path))
        try:
            modified = int(resolved.stat().st_mtime)
        except OSError as exc:
            raise InvalidImageError(
                f"File is not readable: {resolved}",
                source=str(resolved),
                retryable=False,
            ) from exc

        key = build_cache_key(SourceType.LOCAL, str(resolved), modified)
        return self._cached(key, lambda: self._dimensions_from_path(resolved))

    def _dimensions_from_path(self, path: Path) -> Dimensions:
        try:
            size = path.stat().st_size
            if size == 0:
                raise InvalidImageError(
                    f"File is empty: {path}", source=str(path), retryable=False
                )
            with path.open("rb") as handle:
                head = handle.read(self.config.remote_read_bytes)
        except OSError as exc:
            raise InvalidImageError(
                f"File is not readable: {path}", source=str(path), retryable=False
            ) from exc

        extension = extension_of(path.name)
        try:
            return extract_dimensions(
                head, extension=extension, total_size=size, config=self.config
            )
        except InvalidImageError as exc:
            if len(head) >= size or not exc.retryable:
                exc.source = exc.source or str(path)
                raise
            logger.debug("Header of %s not in first %s bytes", path, len(head))

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise InvalidImageError(
                f"File is not readable: {path}", source=str(path), retryable=False
            ) from exc
        try:
            return extract_dimensions(
                data, extension=extension, total_size=len(data), config=self.config
            )
        except InvalidImageError as exc:
            exc.source = exc.source or str(path)
            raise

    def from_url(self, url: str) -> Dimensions:
        """Get image dimensions from an http(s) URL.

        Raises:
            InvalidInputError: If the URL is malformed or not http(s)
            UrlAccessError: If the URL cannot be opened or downloaded
            TemporaryFileError: If the staging file cannot be used
            InvalidImageError: If the payload is not a recognized image
        """
        url = require_url(url)
        key = build_cache_key(SourceType.URL, url)

        def compute() -> Dimensions:
            with build_client(self.config.http, transport=self._transport) as client:
                return self._strategy.resolve(UrlFetcher(url, client))

        return self._cached(key, compute)

    def from_storage(self, disk_name: str, path: str) -> Dimensions:
        """Get image dimensions from a file on a named storage disk.

        Disks backed by the local filesystem are read in place.

        Raises:
            InvalidInputError: If the disk name or path is empty or the
                disk is unknown
            ImageNotFoundError: If the object does not exist on the disk
            StorageAccessError: If the backend cannot be read
            TemporaryFileError: If the staging file cannot be used
            InvalidImageError: If the payload is not a recognized image
        """
        disk_name = require_non_empty(disk_name, "Disk name")
        path = require_non_empty(path, "Path")

        disk = self.disks.get(disk_name)
        if disk is None:
            raise InvalidInputError(
                f"Unknown disk: {disk_name}", source=f"{disk_name}:{path}"
            )

        try:
            exists = disk.exists(path)
        except ImageDimensionsError:
            raise
        except Exception as exc:
            raise StorageAccessError.could_not_read_stream(path) from exc
        if not exists:
            raise ImageNotFoundError.for_storage(disk_name, path)

        local = disk.local_path(path)
        if local is not None:
            logger.debug("Disk %s is local, reading %s in place", disk_name, local)
            return self.from_local(local)

        try:
            modified = disk.last_modified(path)
        except Exception as exc:
            raise StorageAccessError(
                f"Could not read modification time of storage file: {path}",
                source=f"{disk_name}:{path}",
            ) from exc

        key = build_cache_key(SourceType.STORAGE, f"{disk_name}:{path}", modified)
        fetcher = StorageFetcher(disk_name, disk, path)
        return self._cached(key, lambda: self._strategy.resolve(fetcher))

    async def afrom_local(self, path: str | Path) -> Dimensions:
        """Async variant of :meth:`from_local`, run in a worker thread."""
        return await anyio.to_thread.run_sync(self.from_local, path)

    async def afrom_url(self, url: str) -> Dimensions:
        """Async variant of :meth:`from_url`, run in a worker thread."""
        return await anyio.to_thread.run_sync(self.from_url, url)

    async def afrom_storage(self, disk_name: str, path: str) -> Dimensions:
        """Async variant of :meth:`from_storage`, run in a worker thread."""
        return await anyio.to_thread.run_sync(self.from_storage, disk_name, path)


__all__ = ["ImageDimensionsResolver"]
