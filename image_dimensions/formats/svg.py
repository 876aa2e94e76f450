"""SVG dimension resolution.

Active content is stripped before the document reaches the XML parser, then
the root ``width``/``height`` are read, falling back to the ``viewBox``.
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as etree

from image_dimensions.exceptions import InvalidImageError

_SCRIPT_RE = re.compile(
    r"<script\b[^>]*?(?:/>|>.*?</script\s*>)", flags=re.IGNORECASE | re.DOTALL
)
_EVENT_ATTR_RE = re.compile(
    r"""\s+on[a-z]+\s*=\s*(?:"[^"]*"|'[^']*')""", flags=re.IGNORECASE
)
_DOCTYPE_RE = re.compile(
    r"<!DOCTYPE[^\[>]*(?:\[.*?\]\s*)?>", flags=re.IGNORECASE | re.DOTALL
)
_SVG_HEAD_RE = re.compile(
    r"""^\s*
        (?:<\?xml.*?\?>\s*)?
        (?:(?:<!--.*?-->|<!DOCTYPE[^\[>]*(?:\[.*?\]\s*)?>|<\?.*?\?>)\s*)*
        <svg[\s>/]""",
    flags=re.IGNORECASE | re.DOTALL | re.VERBOSE,
)
_LENGTH_RE = re.compile(
    r"^\s*\+?((?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?)\s*([a-z%]*)\s*$",
    flags=re.IGNORECASE,
)
_VIEWBOX_SPLIT_RE = re.compile(r"[\s,]+")

# Pixels per unit at 96 dpi with a 16px font, used only when conversion is on.
UNIT_TO_PX = {
    "px": 1.0,
    "in": 96.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "mm": 96.0 / 25.4,
    "cm": 96.0 / 2.54,
    "em": 16.0,
    "ex": 8.0,
}

SNIFF_CHARS = 64 * 1024


def decode_svg(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


def looks_like_svg(data: bytes) -> bool:
    """Return True when the leading content opens an ``<svg>`` root."""
    head = decode_svg(data[:SNIFF_CHARS])
    return bool(_SVG_HEAD_RE.match(head))


def sanitize_svg(text: str) -> str:
    """Remove scripts, ``on*`` handlers and the doctype."""
    text = _SCRIPT_RE.sub("", text)
    text = _EVENT_ATTR_RE.sub("", text)
    return _DOCTYPE_RE.sub("", text)


def parse_length(value: str | None, *, convert_units: bool = False) -> int | None:
    """Parse a width/height attribute into whole pixels.

    Only unitless and ``px`` values are trusted unless ``convert_units`` is
    set. Percentages never resolve.
    """
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None

    number = float(match.group(1))
    unit = match.group(2).lower() or "px"
    if unit != "px" and not convert_units:
        return None
    factor = UNIT_TO_PX.get(unit)
    if factor is None:
        return None

    pixels = number * factor
    if not math.isfinite(pixels) or pixels <= 0:
        return None
    return math.ceil(pixels)


def parse_view_box(value: str | None) -> tuple[int, int] | None:
    """Return the ceiled viewBox width and height, or None if malformed."""
    if not value:
        return None
    parts = _VIEWBOX_SPLIT_RE.split(value.strip())
    if len(parts) != 4:
        return None
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        return None
    if not all(math.isfinite(number) for number in numbers):
        return None

    width = math.ceil(abs(numbers[2]))
    height = math.ceil(abs(numbers[3]))
    if width <= 0 or height <= 0:
        return None
    return width, height


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def svg_size(text: str, *, convert_units: bool = False) -> tuple[int, int]:
    """Resolve the pixel size of an SVG document.

    Args:
        text: SVG markup
        convert_units: Convert absolute and font-relative units to pixels

    Returns:
        Tuple of (width, height)

    Raises:
        InvalidImageError: On malformed XML, a non-svg root, or when no
            dimensions can be determined
    """
    try:
        root = etree.fromstring(sanitize_svg(text))
    except etree.ParseError as exc:
        raise InvalidImageError(f"Invalid XML content: {exc}") from exc

    if _local_name(root.tag) != "svg":
        raise InvalidImageError(
            f"Invalid SVG (root element is <{_local_name(root.tag)}>)"
        )

    width = parse_length(root.get("width"), convert_units=convert_units)
    height = parse_length(root.get("height"), convert_units=convert_units)
    if width is not None and height is not None:
        return width, height

    view_box = parse_view_box(root.get("viewBox"))
    if view_box is not None:
        return view_box

    raise InvalidImageError(
        "Could not determine SVG dimensions (no usable width/height or viewBox)"
    )


__all__ = [
    "UNIT_TO_PX",
    "decode_svg",
    "looks_like_svg",
    "parse_length",
    "parse_view_box",
    "sanitize_svg",
    "svg_size",
]
