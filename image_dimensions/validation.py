"""Source validation utilities.

Validates paths, disk names and URLs before any I/O happens.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlparse

from image_dimensions.exceptions import (
    ImageNotFoundError,
    InvalidImageError,
    InvalidInputError,
)

ALLOWED_URL_SCHEMES = frozenset({"http", "https"})


def validate_url(url: str) -> tuple[bool, str | None]:
    """Validate a URL and return status with reason.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, reason_if_invalid)
    """
    if not url or not url.strip():
        return False, "URL is empty"

    if any(char.isspace() or not char.isprintable() for char in url.strip()):
        return False, "invalid URL"

    try:
        parsed = urlparse(url.strip())
        # Accessing port validates it.
        parsed.port
    except ValueError:
        return False, "invalid URL"

    if not parsed.scheme or not parsed.netloc or not parsed.hostname:
        return False, "invalid URL"

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return False, f"unsupported scheme: {parsed.scheme}"

    return True, None


def require_url(url: str) -> str:
    """Return the trimmed URL or raise :class:`InvalidInputError`."""
    is_valid, reason = validate_url(url)
    if not is_valid:
        raise InvalidInputError(f"Invalid URL provided: {url} ({reason})", source=url)
    return url.strip()


def require_non_empty(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{what} must be a non-empty string")
    return value.strip()


def resolve_local_path(path: str) -> Path:
    """Canonicalize a local path and check it can be read.

    Raises:
        InvalidInputError: If the path is empty or malformed
        ImageNotFoundError: If nothing exists at the resolved path
        InvalidImageError: If the path is not a readable file
    """
    raw = require_non_empty(path, "Path")
    if "\x00" in raw:
        raise InvalidInputError(f"Invalid path: {path!r}", source=path)
    try:
        resolved = Path(raw).expanduser().resolve()
        exists = resolved.exists()
    except ValueError as exc:
        raise InvalidInputError(f"Invalid path: {path!r}", source=path) from exc

    if not exists:
        raise ImageNotFoundError.for_local(str(resolved))

    if not resolved.is_file():
        raise InvalidImageError(
            f"Path is not a file: {resolved}", source=str(resolved), retryable=False
        )

    if not os.access(resolved, os.R_OK):
        raise InvalidImageError(
            f"File is not readable: {resolved}", source=str(resolved), retryable=False
        )

    return resolved


def extension_of(path: str) -> str:
    """Lower-case extension without the dot; URLs use their path component."""
    if "://" in path:
        path = urlparse(path).path
    return Path(path).suffix.lower().lstrip(".")


__all__ = [
    "ALLOWED_URL_SCHEMES",
    "extension_of",
    "require_non_empty",
    "require_url",
    "resolve_local_path",
    "validate_url",
]
