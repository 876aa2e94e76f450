"""Raster container header parsers.

Each parser reads width and height straight from the container header
without decoding pixel data. Parsers raise :class:`InvalidImageError` when
the buffer is too short or the header is malformed.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator

from image_dimensions.exceptions import InvalidImageError
from image_dimensions.models import ImageFormat

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
ICO_SIGNATURE = b"\x00\x00\x01\x00"

# SOF markers carrying frame dimensions. C4 (DHT), C8 (JPG) and CC (DAC)
# share the range but are not frames.
JPEG_SOF_MARKERS = frozenset(
    {0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF}
)
# Markers without a length field.
JPEG_STANDALONE_MARKERS = frozenset({0x01, 0xD8, *range(0xD0, 0xD8)})

AVIF_BRANDS = frozenset({b"avif", b"avis"})
# Boxes on the path from the top level down to ``ispe``.
AVIF_CONTAINER_BOXES = frozenset({b"meta", b"iprp", b"ipco"})


def _too_short(fmt: str) -> InvalidImageError:
    return InvalidImageError(f"Invalid {fmt} (truncated header)")


def _require(data: bytes, length: int, fmt: str) -> None:
    if len(data) < length:
        raise _too_short(fmt)


def _positive(width: int, height: int, fmt: str) -> tuple[int, int]:
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Invalid {fmt} dimensions: {width}x{height}")
    return width, height


def sniff_format(data: bytes) -> ImageFormat | None:
    """Identify a raster container from its leading bytes."""
    if data.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if data.startswith(b"\xff\xd8"):
        return ImageFormat.JPEG
    if data[:6] in GIF_SIGNATURES:
        return ImageFormat.GIF
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ImageFormat.WEBP
    if data.startswith(b"BM"):
        return ImageFormat.BMP
    # A 256-byte ftyp box also starts with the ICO signature.
    if data[4:8] == b"ftyp" and _is_avif_ftyp(data):
        return ImageFormat.AVIF
    if data.startswith(ICO_SIGNATURE):
        return ImageFormat.ICO
    return None


def png_size(data: bytes) -> tuple[int, int]:
    _require(data, 24, "PNG")
    if not data.startswith(PNG_SIGNATURE):
        raise InvalidImageError("Invalid PNG signature")
    # IHDR is the first chunk; width/height are big-endian uint32.
    if data[12:16] != b"IHDR":
        raise InvalidImageError("Invalid PNG (missing IHDR)")
    width, height = struct.unpack(">II", data[16:24])
    return _positive(width, height, "PNG")


def gif_size(data: bytes) -> tuple[int, int]:
    _require(data, 10, "GIF")
    if data[:6] not in GIF_SIGNATURES:
        raise InvalidImageError("Invalid GIF signature")
    width, height = struct.unpack("<HH", data[6:10])
    return _positive(width, height, "GIF")


def bmp_size(data: bytes) -> tuple[int, int]:
    _require(data, 18, "BMP")
    if not data.startswith(b"BM"):
        raise InvalidImageError("Invalid BMP signature")

    header_size = struct.unpack("<I", data[14:18])[0]
    if header_size == 12:
        # OS/2 BITMAPCOREHEADER
        _require(data, 22, "BMP")
        width, height = struct.unpack("<HH", data[18:22])
    elif header_size >= 40:
        # BITMAPINFOHEADER and V2..V5; negative height means top-down rows.
        _require(data, 26, "BMP")
        width, height = struct.unpack("<ii", data[18:26])
        height = abs(height)
    else:
        raise InvalidImageError(f"Invalid BMP (unknown DIB header size {header_size})")
    return _positive(width, height, "BMP")


def jpeg_size(data: bytes) -> tuple[int, int]:
    _require(data, 4, "JPEG")
    if data[:2] != b"\xff\xd8":
        raise InvalidImageError("Invalid JPEG signature")

    i = 2
    length = len(data)
    while i < length:
        if data[i] != 0xFF:
            i += 1
            continue

        # Skip fill bytes
        while i < length and data[i] == 0xFF:
            i += 1
        if i >= length:
            break

        marker = data[i]
        i += 1

        if marker in JPEG_STANDALONE_MARKERS:
            continue
        if marker in (0xD9, 0xDA):
            # EOI or start of scan: no frame header before image data
            raise InvalidImageError("Invalid JPEG (no SOF marker before scan data)")

        if i + 2 > length:
            break
        seg_len = struct.unpack(">H", data[i : i + 2])[0]
        if seg_len < 2:
            raise InvalidImageError("Invalid JPEG segment length")

        if marker in JPEG_SOF_MARKERS:
            # length(2) precision(1) height(2) width(2)
            if i + 7 > length:
                break
            height, width = struct.unpack(">HH", data[i + 3 : i + 7])
            return _positive(width, height, "JPEG")

        i += seg_len

    raise _too_short("JPEG")


def webp_size(data: bytes) -> tuple[int, int]:
    _require(data, 16, "WebP")
    if data[:4] != b"RIFF" or data[8:12] != b"WEBP":
        raise InvalidImageError("Invalid WebP signature")

    chunk = data[12:16]
    if chunk == b"VP8 ":
        # Lossy: 3 byte frame tag, start code 9D 01 2A, then 14-bit sizes.
        _require(data, 30, "WebP")
        if data[23:26] != b"\x9d\x01\x2a":
            raise InvalidImageError("Invalid WebP (bad VP8 start code)")
        width, height = struct.unpack("<HH", data[26:30])
        return _positive(width & 0x3FFF, height & 0x3FFF, "WebP")

    if chunk == b"VP8L":
        # Lossless: signature 0x2F, then width-1 and height-1 in 14 bits each.
        _require(data, 25, "WebP")
        if data[20] != 0x2F:
            raise InvalidImageError("Invalid WebP (bad VP8L signature)")
        bits = struct.unpack("<I", data[21:25])[0]
        width = (bits & 0x3FFF) + 1
        height = ((bits >> 14) & 0x3FFF) + 1
        return _positive(width, height, "WebP")

    if chunk == b"VP8X":
        # Extended: canvas width-1 and height-1 as 24-bit little endian.
        _require(data, 30, "WebP")
        width = int.from_bytes(data[24:27], "little") + 1
        height = int.from_bytes(data[27:30], "little") + 1
        return _positive(width, height, "WebP")

    raise InvalidImageError(f"Invalid WebP (unknown chunk {chunk!r})")


def ico_size(data: bytes) -> tuple[int, int]:
    _require(data, 6, "ICO")
    if not data.startswith(ICO_SIGNATURE):
        raise InvalidImageError("Invalid ICO signature")

    count = struct.unpack("<H", data[4:6])[0]
    if count == 0:
        raise InvalidImageError("Invalid ICO (no images)")
    _require(data, 6 + count * 16, "ICO")

    best = (0, 0)
    for index in range(count):
        offset = 6 + index * 16
        # A zero byte encodes 256 pixels.
        width = data[offset] or 256
        height = data[offset + 1] or 256
        if width * height > best[0] * best[1]:
            best = (width, height)
    return _positive(best[0], best[1], "ICO")


def _iter_boxes(data: bytes, start: int, end: int) -> Iterator[tuple[bytes, int, int]]:
    """Yield (type, payload_start, box_end) for ISO BMFF boxes in a range."""
    offset = start
    while offset + 8 <= end:
        size, box_type = struct.unpack(">I4s", data[offset : offset + 8])
        header = 8
        if size == 1:
            if offset + 16 > end:
                raise _too_short("AVIF")
            size = struct.unpack(">Q", data[offset + 8 : offset + 16])[0]
            header = 16
        elif size == 0:
            size = end - offset
        if size < header:
            raise InvalidImageError(f"Invalid AVIF box size for {box_type!r}")
        yield box_type, offset + header, offset + size
        offset += size


def _is_avif_ftyp(data: bytes) -> bool:
    if len(data) < 12:
        return False
    size = struct.unpack(">I", data[0:4])[0]
    brands = [data[8:12]]
    end = min(size, len(data))
    # Compatible brands follow major brand and minor version.
    for offset in range(16, end - 3, 4):
        brands.append(data[offset : offset + 4])
    return any(brand in AVIF_BRANDS for brand in brands)


def avif_size(data: bytes) -> tuple[int, int]:
    _require(data, 12, "AVIF")
    if data[4:8] != b"ftyp" or not _is_avif_ftyp(data):
        raise InvalidImageError("Invalid AVIF (missing avif ftyp brand)")

    sizes: list[tuple[int, int]] = []

    def walk(start: int, end: int) -> None:
        for box_type, payload, box_end in _iter_boxes(data, start, end):
            if box_end > len(data):
                # Box runs past the buffer; only descend if it may hold ispe.
                if box_type not in AVIF_CONTAINER_BOXES:
                    raise _too_short("AVIF")
                box_end = len(data)
            if box_type == b"ispe":
                # Full box: version/flags then width and height as uint32.
                if payload + 12 > box_end:
                    raise _too_short("AVIF")
                width, height = struct.unpack(">II", data[payload + 4 : payload + 12])
                sizes.append((width, height))
            elif box_type == b"meta":
                walk(payload + 4, box_end)
            elif box_type in AVIF_CONTAINER_BOXES:
                walk(payload, box_end)
            if box_type == b"meta":
                return

    walk(0, len(data))
    if not sizes:
        raise InvalidImageError("Invalid AVIF (no ispe property found)")
    # Grid images carry an ispe per tile as well as the full canvas.
    width, height = max(sizes, key=lambda size: size[0] * size[1])
    return _positive(width, height, "AVIF")


PARSERS: dict[ImageFormat, Callable[[bytes], tuple[int, int]]] = {
    ImageFormat.PNG: png_size,
    ImageFormat.JPEG: jpeg_size,
    ImageFormat.GIF: gif_size,
    ImageFormat.BMP: bmp_size,
    ImageFormat.WEBP: webp_size,
    ImageFormat.ICO: ico_size,
    ImageFormat.AVIF: avif_size,
}


def raster_size(data: bytes, fmt: ImageFormat) -> tuple[int, int]:
    """Dispatch to the parser for ``fmt``."""
    try:
        parser = PARSERS[fmt]
    except KeyError:
        raise InvalidImageError(f"No raster parser for {fmt.value}") from None
    return parser(data)


__all__ = [
    "PARSERS",
    "avif_size",
    "bmp_size",
    "gif_size",
    "ico_size",
    "jpeg_size",
    "png_size",
    "raster_size",
    "sniff_format",
    "webp_size",
]
