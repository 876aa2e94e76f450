from __future__ import annotations

import struct
from collections.abc import Callable
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import pytest
from PIL import Image as PilImage

from image_dimensions import Disk, ResolverConfig


def pil_bytes(fmt: str, size: tuple[int, int], **save_kwargs: Any) -> bytes:
    mode = "RGBA" if fmt == "ICO" else "RGB"
    img = PilImage.new(mode, size, (200, 40, 40))
    buf = BytesIO()
    img.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


def jpeg_with_padding(size: tuple[int, int], padding: int) -> bytes:
    """JPEG whose SOF marker sits behind ``padding`` bytes of comments."""
    data = pil_bytes("JPEG", size)
    segments = b""
    remaining = padding
    while remaining > 0:
        chunk = min(remaining, 60000)
        segments += b"\xff\xfe" + struct.pack(">H", chunk + 2) + b"x" * chunk
        remaining -= chunk
    return data[:2] + segments + data[2:]


class FakeDisk(Disk):
    """Remote-looking disk backed by a dict, recording every access."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})
        self.modified: dict[str, int] = {name: 1_700_000_000 for name in self.files}
        self.stream_opens = 0
        self.full_reads = 0
        self.fail_stream = False
        self.fail_full = False

    def exists(self, path: str) -> bool:
        return path in self.files

    def last_modified(self, path: str) -> int:
        return self.modified[path]

    def open_stream(self, path: str) -> BinaryIO:
        self.stream_opens += 1
        if self.fail_stream:
            raise OSError("backend unavailable")
        return BytesIO(self.files[path])

    def read_bytes(self, path: str) -> bytes:
        self.full_reads += 1
        if self.fail_full:
            raise OSError("backend unavailable")
        return self.files[path]

    def size(self, path: str) -> int | None:
        return len(self.files[path])


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def config(staging_dir: Path) -> ResolverConfig:
    return ResolverConfig(temp_dir=staging_dir)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    def _write(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    return pil_bytes


@pytest.fixture
def padded_jpeg() -> Callable[[tuple[int, int], int], bytes]:
    return jpeg_with_padding


@pytest.fixture
def fake_disk() -> Callable[..., FakeDisk]:
    return FakeDisk
