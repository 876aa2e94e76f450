"""Storage-backed byte sources.

A :class:`Disk` is a named storage backend (a local directory, an object
store, ...). Disks that live on the local filesystem expose ``local_path`` so
the resolver can read them directly instead of staging.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from image_dimensions.exceptions import (
    ImageDimensionsError,
    InvalidInputError,
    StorageAccessError,
)
from image_dimensions.models import SourceType
from image_dimensions.sources import ByteStream, Fetcher, FileStream
from image_dimensions.validation import extension_of

logger = logging.getLogger("image_dimensions.sources")


class Disk(ABC):
    """Abstract storage backend addressed by relative paths."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if an object exists at ``path``."""

    @abstractmethod
    def last_modified(self, path: str) -> int:
        """Return the modification time as a Unix timestamp."""

    @abstractmethod
    def open_stream(self, path: str) -> BinaryIO:
        """Open a binary read stream positioned at the start of the object."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Return the entire object."""

    def size(self, path: str) -> int | None:
        """Return the object size in bytes when cheaply known."""
        return None

    def local_path(self, path: str) -> Path | None:
        """Return a filesystem path for the object, or None if not local."""
        return None


class LocalDisk(Disk):
    """Disk rooted at a local directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser().resolve()

    def _resolve(self, path: str) -> Path:
        candidate = (self.root / path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.root):
            raise InvalidInputError(
                f"Path escapes disk root: {path}", source=str(candidate)
            )
        return candidate

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def last_modified(self, path: str) -> int:
        return int(self._resolve(path).stat().st_mtime)

    def open_stream(self, path: str) -> BinaryIO:
        return self._resolve(path).open("rb")

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def size(self, path: str) -> int | None:
        return self._resolve(path).stat().st_size

    def local_path(self, path: str) -> Path | None:
        return self._resolve(path)


class _StorageStream(FileStream):
    def __init__(self, handle: BinaryIO, path: str, *, total_size: int | None) -> None:
        super().__init__(handle, total_size=total_size)
        self._path = path

    def read(self, size: int) -> bytes:
        try:
            return super().read(size)
        except OSError as exc:
            raise StorageAccessError.could_not_read_stream(self._path) from exc


class StorageFetcher(Fetcher):
    """Fetcher that reads one object from a :class:`Disk`."""

    def __init__(self, disk_name: str, disk: Disk, path: str) -> None:
        self.disk_name = disk_name
        self.disk = disk
        self.path = path

    @property
    def source_type(self) -> SourceType:
        return SourceType.STORAGE

    @property
    def identifier(self) -> str:
        return f"{self.disk_name}:{self.path}"

    @property
    def extension(self) -> str:
        return extension_of(self.path)

    def open_stream(self) -> ByteStream:
        try:
            handle = self.disk.open_stream(self.path)
        except ImageDimensionsError:
            raise
        except Exception as exc:
            raise StorageAccessError.could_not_read_stream(self.path) from exc
        if handle is None:
            raise StorageAccessError.could_not_read_stream(self.path)

        try:
            total_size = self.disk.size(self.path)
        except Exception:
            logger.debug("Could not determine size of %s", self.identifier)
            total_size = None
        return _StorageStream(handle, self.path, total_size=total_size)

    def fetch_full(self) -> bytes:
        try:
            content = self.disk.read_bytes(self.path)
        except ImageDimensionsError:
            raise
        except Exception as exc:
            raise StorageAccessError.could_not_read_full_content(self.path) from exc
        if content is None:
            raise StorageAccessError.could_not_read_full_content(self.path)
        logger.debug("Read %s bytes from %s", len(content), self.identifier)
        return content


__all__ = ["Disk", "LocalDisk", "StorageFetcher"]
