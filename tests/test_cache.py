from __future__ import annotations

import hashlib

from image_dimensions import Dimensions, MemoryCache, SourceType, build_cache_key


def test_cache_key_format() -> None:
    digest = hashlib.md5(b"/srv/img.png").hexdigest()
    assert (
        build_cache_key(SourceType.LOCAL, "/srv/img.png", 1700000000)
        == f"image_dimensions:local:{digest}:1700000000"
    )


def test_cache_key_without_modified_time() -> None:
    digest = hashlib.md5(b"https://example.com/a.png").hexdigest()
    assert (
        build_cache_key(SourceType.URL, "https://example.com/a.png")
        == f"image_dimensions:url:{digest}"
    )


def test_cache_key_changes_with_modified_time() -> None:
    first = build_cache_key(SourceType.STORAGE, "s3:a.png", 1)
    second = build_cache_key(SourceType.STORAGE, "s3:a.png", 2)
    assert first != second
    assert first.startswith("image_dimensions:storage:")


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_memory_cache_computes_once_within_ttl() -> None:
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    calls: list[int] = []

    def compute() -> Dimensions:
        calls.append(1)
        return Dimensions(3, 4)

    assert cache.get_or_compute("k", 10, compute) == Dimensions(3, 4)
    clock.now += 5
    assert cache.get_or_compute("k", 10, compute) == Dimensions(3, 4)
    assert len(calls) == 1

    clock.now += 10
    cache.get_or_compute("k", 10, compute)
    assert len(calls) == 2


def test_memory_cache_zero_ttl_never_expires() -> None:
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    cache.get_or_compute("k", 0, lambda: Dimensions(1, 1))
    clock.now += 1_000_000
    assert cache.get_or_compute("k", 0, lambda: Dimensions(2, 2)) == Dimensions(1, 1)


def test_memory_cache_does_not_store_failures() -> None:
    cache = MemoryCache()

    def boom() -> Dimensions:
        raise RuntimeError("nope")

    try:
        cache.get_or_compute("k", 10, boom)
    except RuntimeError:
        pass
    assert len(cache) == 0
    cache.clear()
