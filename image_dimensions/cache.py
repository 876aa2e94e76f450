"""Cache key derivation and the cache collaborator contract."""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, TypeVar

from image_dimensions.constants import CACHE_KEY_PREFIX
from image_dimensions.models import SourceType

T = TypeVar("T")

logger = logging.getLogger("image_dimensions.cache")


def build_cache_key(
    source_type: SourceType,
    identifier: str,
    modified_time: int | None = None,
) -> str:
    """Build ``image_dimensions:<type>:<md5(identifier)>[:<mtime>]``."""
    digest = hashlib.md5(identifier.encode("utf-8")).hexdigest()
    key = f"{CACHE_KEY_PREFIX}:{source_type.value}:{digest}"
    if modified_time is not None:
        key = f"{key}:{modified_time}"
    return key


class DimensionsCache(Protocol):
    """Anything offering get-or-compute with a TTL in seconds."""

    def get_or_compute(self, key: str, ttl: int, compute: Callable[[], T]) -> T: ...


class MemoryCache:
    """In-process TTL cache.

    A ``ttl`` of 0 keeps entries until cleared. Concurrent misses on the same
    key may compute twice; the last result wins.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float | None, object]] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, key: str, ttl: int, compute: Callable[[], T]) -> T:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                expires_at, value = entry
                if expires_at is None or expires_at > now:
                    logger.debug("Cache hit for %s", key)
                    return value  # type: ignore[return-value]
                del self._entries[key]

        logger.debug("Cache miss for %s", key)
        value = compute()
        expires_at = now + ttl if ttl > 0 else None
        with self._lock:
            self._entries[key] = (expires_at, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["DimensionsCache", "MemoryCache", "build_cache_key"]
