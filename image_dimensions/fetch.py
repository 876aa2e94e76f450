"""Bounded-prefix-then-full-fetch strategy.

Remote payloads are staged in a temporary file. A capped prefix is read first
because nearly every container keeps its dimensions in the first few
kilobytes; only when that prefix cannot be parsed is the full payload
downloaded. Transport errors never trigger the fallback.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from image_dimensions.config import ResolverConfig
from image_dimensions.constants import READ_CHUNK_BYTES, TEMP_FILE_PREFIX
from image_dimensions.exceptions import InvalidImageError, TemporaryFileError
from image_dimensions.formats import extract_dimensions
from image_dimensions.models import Dimensions, FetchedBytes
from image_dimensions.sources import ByteStream, Fetcher

logger = logging.getLogger("image_dimensions.fetch")


@contextmanager
def staging_file(temp_dir: Path, label: str = "remote") -> Iterator[Path]:
    """Create a temporary file that is removed on every exit path.

    Raises:
        TemporaryFileError: If the file cannot be created
    """
    try:
        fd, name = tempfile.mkstemp(
            prefix=f"{TEMP_FILE_PREFIX}{label}_", dir=temp_dir
        )
    except OSError as exc:
        raise TemporaryFileError.could_not_create(str(temp_dir)) from exc
    os.close(fd)

    path = Path(name)
    logger.debug("Created staging file %s", path)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed staging file %s", path)


def copy_prefix(
    stream: ByteStream,
    handle: BinaryIO,
    max_bytes: int,
    *,
    stall_limit: int,
    stall_sleep: float,
) -> tuple[int, bool]:
    """Copy at most ``max_bytes`` from ``stream`` into ``handle``.

    Reads in chunks of at most 8 KiB. A run of ``stall_limit`` empty reads
    without end of stream ends the copy early.

    Returns:
        Tuple of (bytes_written, reached_end_of_stream)
    """
    written = 0
    empty_reads = 0
    while written < max_bytes:
        chunk = stream.read(min(READ_CHUNK_BYTES, max_bytes - written))
        if not chunk:
            if stream.eof:
                return written, True
            empty_reads += 1
            if empty_reads >= stall_limit:
                logger.warning(
                    "Stream stalled after %s bytes (%s empty reads), "
                    "aborting bounded read",
                    written,
                    empty_reads,
                )
                return written, False
            time.sleep(stall_sleep)
            continue

        empty_reads = 0
        try:
            handle.write(chunk)
        except OSError as exc:
            name = getattr(handle, "name", None)
            raise TemporaryFileError.could_not_write(name) from exc
        written += len(chunk)

    return written, False


def _write_full(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise TemporaryFileError.could_not_write(str(path)) from exc


class FetchStrategy:
    """Resolve dimensions of a remote source with as few bytes as possible."""

    def __init__(self, config: ResolverConfig) -> None:
        self.config = config

    def _extract(self, fetched: FetchedBytes) -> Dimensions:
        return extract_dimensions(
            fetched.read(),
            extension=fetched.extension,
            total_size=fetched.total_size,
            config=self.config,
        )

    def _stage_prefix(self, fetcher: Fetcher, path: Path) -> FetchedBytes:
        stream = fetcher.open_stream()
        try:
            try:
                handle = path.open("wb")
            except OSError as exc:
                raise TemporaryFileError.could_not_write(str(path)) from exc
            with handle:
                written, at_eof = copy_prefix(
                    stream,
                    handle,
                    self.config.remote_read_bytes,
                    stall_limit=self.config.stall_read_limit,
                    stall_sleep=self.config.stall_sleep_seconds,
                )
        finally:
            stream.close()

        logger.debug(
            "Read %s byte prefix of %s (complete=%s)",
            written,
            fetcher.identifier,
            at_eof,
        )
        return FetchedBytes(
            path=path,
            size=written,
            complete=at_eof,
            extension=fetcher.extension,
            total_size=written if at_eof else stream.total_size,
        )

    def resolve(self, fetcher: Fetcher) -> Dimensions:
        """Resolve dimensions, falling back to a full download if needed.

        Raises:
            SourceAccessError: On transport or backend failures
            TemporaryFileError: If the staging file cannot be used
            InvalidImageError: If even the full payload yields no dimensions
        """
        with staging_file(self.config.temp_dir, fetcher.source_type.value) as path:
            prefix = self._stage_prefix(fetcher, path)
            try:
                return self._extract(prefix)
            except InvalidImageError as exc:
                if prefix.complete or not exc.retryable:
                    exc.source = exc.source or fetcher.identifier
                    raise
                logger.debug(
                    "Prefix of %s was not enough (%s), fetching full content",
                    fetcher.identifier,
                    exc,
                )

            content = fetcher.fetch_full()
            _write_full(path, content)
            full = FetchedBytes(
                path=path,
                size=len(content),
                complete=True,
                extension=fetcher.extension,
                total_size=len(content),
            )
            try:
                return self._extract(full)
            except InvalidImageError as exc:
                exc.source = exc.source or fetcher.identifier
                raise


__all__ = ["FetchStrategy", "copy_prefix", "staging_file"]
