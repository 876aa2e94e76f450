"""Core data models for dimension resolution.

These models describe what flows through the resolver: a source descriptor
goes in, fetched bytes are staged and classified, and dimensions come out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class SourceType(Enum):
    """Kinds of byte sources; the value is used in cache keys."""

    LOCAL = "local"
    URL = "url"
    STORAGE = "storage"


class ImageFormat(Enum):
    """Container formats the header parsers understand."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    WEBP = "webp"
    ICO = "ico"
    AVIF = "avif"
    SVG = "svg"

    @property
    def extensions(self) -> frozenset[str]:
        """File extensions that name this format."""
        if self is ImageFormat.JPEG:
            return frozenset({"jpg", "jpeg", "jpe"})
        return frozenset({self.value})


@dataclass(frozen=True)
class Dimensions:
    """Pixel size of an image. Both sides are positive."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Dimensions must be positive, got {self.width}x{self.height}"
            )

    def as_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}

    def as_tuple(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class LocalSource:
    path: str

    @property
    def source_type(self) -> SourceType:
        return SourceType.LOCAL


@dataclass(frozen=True)
class UrlSource:
    url: str

    @property
    def source_type(self) -> SourceType:
        return SourceType.URL


@dataclass(frozen=True)
class StorageSource:
    disk_name: str
    path: str

    @property
    def source_type(self) -> SourceType:
        return SourceType.STORAGE


Source = LocalSource | UrlSource | StorageSource


@dataclass
class FetchedBytes:
    """Bytes read from a source, staged on disk.

    ``complete`` is True when the file holds the whole payload rather than a
    bounded prefix.
    """

    path: Path
    size: int
    complete: bool
    extension: str = ""
    total_size: int | None = None

    def read(self) -> bytes:
        return self.path.read_bytes()


__all__ = [
    "Dimensions",
    "FetchedBytes",
    "ImageFormat",
    "LocalSource",
    "Source",
    "SourceType",
    "StorageSource",
    "UrlSource",
]
