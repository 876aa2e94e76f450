from __future__ import annotations

from pathlib import Path

import pytest

from image_dimensions import (
    Dimensions,
    ImageDimensionsResolver,
    ImageNotFoundError,
    InvalidImageError,
    InvalidInputError,
    LocalDisk,
    ResolverConfig,
    StorageAccessError,
    StorageSource,
)


def test_from_storage_remote_disk(
    config: ResolverConfig, staging_dir: Path, fake_disk, make_image
) -> None:
    disk = fake_disk({"photos/cat.png": make_image("PNG", (640, 480))})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})

    assert resolver.from_storage("s3", "photos/cat.png") == Dimensions(640, 480)
    assert disk.stream_opens == 1
    assert disk.full_reads == 0
    assert list(staging_dir.iterdir()) == []


def test_from_storage_fallback(staging_dir: Path, fake_disk, padded_jpeg) -> None:
    config = ResolverConfig(temp_dir=staging_dir, remote_read_bytes=8192)
    disk = fake_disk({"big.jpg": padded_jpeg((300, 100), 25000)})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})

    assert resolver.from_storage("s3", "big.jpg") == Dimensions(300, 100)
    assert disk.full_reads == 1
    assert list(staging_dir.iterdir()) == []


def test_from_storage_local_disk_short_circuits(
    config: ResolverConfig, staging_dir: Path, tmp_path: Path, make_image
) -> None:
    root = tmp_path / "media"
    (root / "projects").mkdir(parents=True)
    (root / "projects" / "a.webp").write_bytes(make_image("WEBP", (20, 10)))
    resolver = ImageDimensionsResolver(config, disks={"local": LocalDisk(root)})

    assert resolver.from_storage("local", "projects/a.webp") == Dimensions(20, 10)
    assert list(staging_dir.iterdir()) == []


def test_local_disk_rejects_escaping_paths(
    config: ResolverConfig, tmp_path: Path
) -> None:
    (tmp_path / "secret.png").write_bytes(b"x")
    root = tmp_path / "media"
    root.mkdir()
    resolver = ImageDimensionsResolver(config, disks={"local": LocalDisk(root)})
    with pytest.raises(InvalidInputError, match="escapes"):
        resolver.from_storage("local", "../secret.png")


def test_unknown_disk(config: ResolverConfig) -> None:
    with pytest.raises(InvalidInputError, match="Unknown disk"):
        ImageDimensionsResolver(config).from_storage("nope", "a.png")


@pytest.mark.parametrize(("disk_name", "path"), [("", "a.png"), ("s3", " ")])
def test_empty_disk_or_path(
    config: ResolverConfig, fake_disk, disk_name: str, path: str
) -> None:
    resolver = ImageDimensionsResolver(config, disks={"s3": fake_disk()})
    with pytest.raises(InvalidInputError, match="non-empty"):
        resolver.from_storage(disk_name, path)


def test_missing_object(config: ResolverConfig, fake_disk) -> None:
    resolver = ImageDimensionsResolver(config, disks={"s3": fake_disk()})
    with pytest.raises(ImageNotFoundError, match="File not found on disk 's3'"):
        resolver.from_storage("s3", "missing.png")


def test_stream_failure_is_access_error(
    config: ResolverConfig, staging_dir: Path, fake_disk, make_image
) -> None:
    disk = fake_disk({"a.png": make_image("PNG", (1, 1))})
    disk.fail_stream = True
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})
    with pytest.raises(StorageAccessError, match="Could not read stream"):
        resolver.from_storage("s3", "a.png")
    assert disk.full_reads == 0
    assert list(staging_dir.iterdir()) == []


def test_full_read_failure_is_access_error(
    staging_dir: Path, fake_disk, padded_jpeg
) -> None:
    config = ResolverConfig(temp_dir=staging_dir, remote_read_bytes=8192)
    disk = fake_disk({"a.jpg": padded_jpeg((2, 2), 20000)})
    disk.fail_full = True
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})
    with pytest.raises(StorageAccessError, match="Could not read full content"):
        resolver.from_storage("s3", "a.jpg")


def test_corrupt_object(config: ResolverConfig, fake_disk) -> None:
    disk = fake_disk({"bad.png": b"\x89PNG\r\n\x1a\n"})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})
    with pytest.raises(InvalidImageError) as exc_info:
        resolver.from_storage("s3", "bad.png")
    assert exc_info.value.source == "s3:bad.png"


def test_cache_key_tracks_modification_time(
    config: ResolverConfig, fake_disk, make_image
) -> None:
    disk = fake_disk({"a.png": make_image("PNG", (10, 10))})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})

    resolver.from_storage("s3", "a.png")
    resolver.from_storage("s3", "a.png")
    assert disk.stream_opens == 1

    disk.files["a.png"] = make_image("PNG", (30, 40))
    disk.modified["a.png"] += 60
    assert resolver.from_storage("s3", "a.png") == Dimensions(30, 40)
    assert disk.stream_opens == 2


def test_resolve_dispatches_storage_source(
    config: ResolverConfig, fake_disk, make_image
) -> None:
    disk = fake_disk({"i.ico": make_image("ICO", (32, 32), sizes=[(32, 32)])})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})
    assert resolver.resolve(StorageSource("s3", "i.ico")) == Dimensions(32, 32)


@pytest.mark.asyncio
async def test_afrom_storage(config: ResolverConfig, fake_disk, make_image) -> None:
    disk = fake_disk({"a.gif": make_image("GIF", (7, 7))})
    resolver = ImageDimensionsResolver(config, disks={"s3": disk})
    assert await resolver.afrom_storage("s3", "a.gif") == Dimensions(7, 7)
