"""Format classification and dimension extraction.

Content sniffing always wins over the extension; the extension is only
consulted for SVG detection and for error reporting.
"""

from __future__ import annotations

from image_dimensions.config import ResolverConfig
from image_dimensions.exceptions import InvalidImageError
from image_dimensions.formats.raster import raster_size, sniff_format
from image_dimensions.formats.svg import decode_svg, looks_like_svg, svg_size
from image_dimensions.models import Dimensions, ImageFormat


def classify(data: bytes, extension: str = "") -> ImageFormat | None:
    """Return the container format of ``data`` or None if unrecognized."""
    fmt = sniff_format(data)
    if fmt is not None:
        return fmt
    if extension.lower().lstrip(".") == "svg" or looks_like_svg(data):
        return ImageFormat.SVG
    return None


def is_format_allowed(fmt: ImageFormat, config: ResolverConfig) -> bool:
    if not config.supported_formats:
        return True
    return bool(fmt.extensions & config.supported_formats)


def extract_dimensions(
    data: bytes,
    *,
    extension: str = "",
    total_size: int | None = None,
    config: ResolverConfig | None = None,
) -> Dimensions:
    """Extract dimensions from a buffer that may be a prefix of the image.

    Args:
        data: Leading bytes, or the complete payload
        extension: Extension hint from the path or URL, without the dot
        total_size: Size of the full payload when known
        config: Resolver configuration (defaults apply when omitted)

    Returns:
        Dimensions of the image

    Raises:
        InvalidImageError: If no dimensions can be extracted. Errors that
            more data cannot fix are marked ``retryable=False``.
    """
    config = config or ResolverConfig()
    extension = extension.lower().lstrip(".")

    if not data:
        raise InvalidImageError("File is empty.")

    fmt = classify(data, extension)
    if fmt is None:
        if extension and not config.is_supported(extension):
            raise InvalidImageError(f"Unsupported image format: {extension}")
        raise InvalidImageError("Unrecognized image content")

    if not is_format_allowed(fmt, config):
        raise InvalidImageError(
            f"Unsupported image format: {fmt.value}", retryable=False
        )

    if fmt is ImageFormat.SVG:
        size = max(len(data), total_size or 0)
        if config.svg_max_file_size and size > config.svg_max_file_size:
            raise InvalidImageError(
                f"SVG exceeds maximum size of {config.svg_max_file_size} bytes "
                f"({size} bytes)",
                retryable=False,
            )
        width, height = svg_size(
            decode_svg(data), convert_units=config.svg_unit_conversion
        )
    else:
        width, height = raster_size(data, fmt)

    return Dimensions(width=width, height=height)


def dimensions_from_bytes(
    data: bytes,
    *,
    extension: str = "",
    config: ResolverConfig | None = None,
) -> Dimensions:
    """Extract dimensions from a complete in-memory image."""
    return extract_dimensions(
        data, extension=extension, total_size=len(data), config=config
    )


def dimensions_from_svg(
    text: str, *, config: ResolverConfig | None = None
) -> Dimensions:
    """Resolve dimensions of SVG markup held as text."""
    return dimensions_from_bytes(text.encode("utf-8"), extension="svg", config=config)


__all__ = [
    "classify",
    "dimensions_from_bytes",
    "dimensions_from_svg",
    "extract_dimensions",
    "is_format_allowed",
]
