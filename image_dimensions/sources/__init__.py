"""Remote byte sources.

A fetcher knows how to open a stream to one URL or storage object and how to
download its full payload. The fetch strategy decides how much of each it
actually reads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import BinaryIO, Protocol

from image_dimensions.models import SourceType


class ByteStream(Protocol):
    """Minimal readable stream used for bounded reads.

    ``read`` may return an empty chunk without the stream being finished;
    ``eof`` tells the two apart.
    """

    eof: bool
    total_size: int | None

    def read(self, size: int) -> bytes: ...

    def close(self) -> None: ...


class IteratorStream:
    """Adapt an iterator of chunks (e.g. an HTTP body) to :class:`ByteStream`."""

    def __init__(
        self,
        chunks: Iterator[bytes],
        *,
        close: Callable[[], None] | None = None,
        total_size: int | None = None,
    ) -> None:
        self._chunks = chunks
        self._close = close
        self._buffer = b""
        self.eof = False
        self.total_size = total_size

    def read(self, size: int) -> bytes:
        if not self._buffer and not self.eof:
            try:
                self._buffer = next(self._chunks)
            except StopIteration:
                self.eof = True
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def close(self) -> None:
        if self._close is not None:
            self._close()
            self._close = None


class FileStream:
    """Adapt a binary file object to :class:`ByteStream`."""

    def __init__(self, handle: BinaryIO, *, total_size: int | None = None) -> None:
        self._handle = handle
        self.eof = False
        self.total_size = total_size

    def read(self, size: int) -> bytes:
        data = self._handle.read(size)
        if data is None:
            # Non-blocking handle with nothing available yet.
            return b""
        if not data:
            self.eof = True
        return data

    def close(self) -> None:
        self._handle.close()


class Fetcher(ABC):
    """Abstract base class for remote byte sources."""

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Return the type of this source."""

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Stable identifier used in cache keys and error messages."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """Extension hint without the dot, or an empty string."""

    @abstractmethod
    def open_stream(self) -> ByteStream:
        """Open a stream to the start of the payload.

        Raises:
            SourceAccessError: If the source cannot be opened
        """

    @abstractmethod
    def fetch_full(self) -> bytes:
        """Download the entire payload.

        Raises:
            SourceAccessError: If the payload cannot be read
        """


__all__ = ["ByteStream", "Fetcher", "FileStream", "IteratorStream"]
