"""Resolver constants.

All defaults and bounds in one place for consistency.
"""

from __future__ import annotations

# Bounded prefix
REMOTE_READ_BYTES_DEFAULT = 128 * 1024
REMOTE_READ_BYTES_MIN = 8 * 1024
REMOTE_READ_BYTES_MAX = 1024 * 1024
READ_CHUNK_BYTES = 8 * 1024

# Stalled stream detection
STALL_READ_LIMIT = 3
STALL_SLEEP_SECONDS = 0.05

# Cache
CACHE_TTL_DEFAULT = 3600  # seconds
CACHE_KEY_PREFIX = "image_dimensions"

# SVG
SVG_MAX_FILE_SIZE_DEFAULT = 10 * 1024 * 1024  # 10 MiB

# HTTP
HTTP_TIMEOUT_DEFAULT = 60.0  # seconds
HTTP_CONNECT_TIMEOUT_DEFAULT = 10.0  # seconds
HTTP_HEADERS = {
    "User-Agent": "image-dimensions/0.1",
    "Accept": "image/*,*/*;q=0.8",
}

# Staging files
TEMP_FILE_PREFIX = "imgdim_"

SUPPORTED_FORMATS_DEFAULT = frozenset(
    {"jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "ico", "avif"}
)

__all__ = [
    "CACHE_KEY_PREFIX",
    "CACHE_TTL_DEFAULT",
    "HTTP_CONNECT_TIMEOUT_DEFAULT",
    "HTTP_HEADERS",
    "HTTP_TIMEOUT_DEFAULT",
    "READ_CHUNK_BYTES",
    "REMOTE_READ_BYTES_DEFAULT",
    "REMOTE_READ_BYTES_MAX",
    "REMOTE_READ_BYTES_MIN",
    "STALL_READ_LIMIT",
    "STALL_SLEEP_SECONDS",
    "SUPPORTED_FORMATS_DEFAULT",
    "SVG_MAX_FILE_SIZE_DEFAULT",
    "TEMP_FILE_PREFIX",
]
