"""Determine image dimensions from local files, URLs and storage disks.

Example:
    from image_dimensions import ImageDimensionsResolver

    resolver = ImageDimensionsResolver()
    size = resolver.from_local("photo.jpg")
    print(f"{size.width}x{size.height}")
"""

from __future__ import annotations

from image_dimensions.cache import DimensionsCache, MemoryCache, build_cache_key
from image_dimensions.config import HttpSettings, ResolverConfig
from image_dimensions.exceptions import (
    ImageDimensionsError,
    ImageNotFoundError,
    InvalidImageError,
    InvalidInputError,
    SourceAccessError,
    StorageAccessError,
    TemporaryFileError,
    UrlAccessError,
)
from image_dimensions.formats import dimensions_from_bytes, dimensions_from_svg
from image_dimensions.logging_config import configure_logging
from image_dimensions.models import (
    Dimensions,
    ImageFormat,
    LocalSource,
    Source,
    SourceType,
    StorageSource,
    UrlSource,
)
from image_dimensions.resolver import ImageDimensionsResolver
from image_dimensions.sources.storage import Disk, LocalDisk

__all__ = [
    # Resolver
    "ImageDimensionsResolver",
    "dimensions_from_bytes",
    "dimensions_from_svg",
    # Configuration
    "HttpSettings",
    "ResolverConfig",
    "configure_logging",
    # Models
    "Dimensions",
    "ImageFormat",
    "LocalSource",
    "Source",
    "SourceType",
    "StorageSource",
    "UrlSource",
    # Collaborators
    "DimensionsCache",
    "Disk",
    "LocalDisk",
    "MemoryCache",
    "build_cache_key",
    # Errors
    "ImageDimensionsError",
    "ImageNotFoundError",
    "InvalidImageError",
    "InvalidInputError",
    "SourceAccessError",
    "StorageAccessError",
    "TemporaryFileError",
    "UrlAccessError",
]
