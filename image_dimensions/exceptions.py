"""Exceptions raised while resolving image dimensions."""

from __future__ import annotations


class ImageDimensionsError(Exception):
    """Base class for every error surfaced by the resolver."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error message
            source: Path, URL or ``disk:path`` the error refers to
        """
        super().__init__(message)
        self.source = source


class ImageNotFoundError(ImageDimensionsError):
    """The referenced local file or storage object does not exist."""

    @classmethod
    def for_local(cls, path: str) -> ImageNotFoundError:
        return cls(f"Local file not found: {path}", source=path)

    @classmethod
    def for_storage(cls, disk_name: str, path: str) -> ImageNotFoundError:
        return cls(
            f"File not found on disk '{disk_name}': {path}",
            source=f"{disk_name}:{path}",
        )


class InvalidImageError(ImageDimensionsError):
    """The bytes could not be turned into dimensions.

    ``retryable`` tells the fetch strategy whether reading more of the
    source could change the outcome.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(message, source=source)
        self.retryable = retryable

    @classmethod
    def for_path(cls, path: str, reason: str | None = None) -> InvalidImageError:
        message = f"Could not get image dimensions for file: {path}"
        if reason:
            message = f"{message} ({reason})"
        return cls(message, source=path)


class InvalidInputError(InvalidImageError):
    """Empty or malformed path, disk name or URL."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message, source=source, retryable=False)


class SourceAccessError(ImageDimensionsError):
    """A remote URL or storage backend could not be opened or read."""


class UrlAccessError(SourceAccessError):
    @classmethod
    def could_not_open(cls, url: str, reason: str | None = None) -> UrlAccessError:
        message = f"Could not open URL: {url}"
        if reason:
            message = f"{message} ({reason})"
        return cls(message, source=url)

    @classmethod
    def could_not_download(
        cls, url: str, reason: str | None = None
    ) -> UrlAccessError:
        message = f"Could not download full content from URL: {url}"
        if reason:
            message = f"{message} ({reason})"
        return cls(message, source=url)


class StorageAccessError(SourceAccessError):
    @classmethod
    def could_not_read_stream(cls, path: str) -> StorageAccessError:
        return cls(f"Could not read stream from storage file: {path}", source=path)

    @classmethod
    def could_not_read_full_content(cls, path: str) -> StorageAccessError:
        return cls(
            f"Could not read full content from storage file: {path}", source=path
        )


class TemporaryFileError(ImageDimensionsError):
    """The staging file could not be created or written."""

    @classmethod
    def could_not_create(cls, directory: str | None = None) -> TemporaryFileError:
        return cls("Could not create temporary file.", source=directory)

    @classmethod
    def could_not_write(cls, path: str | None = None) -> TemporaryFileError:
        return cls("Could not open temporary file for writing.", source=path)


__all__ = [
    "ImageDimensionsError",
    "ImageNotFoundError",
    "InvalidImageError",
    "InvalidInputError",
    "SourceAccessError",
    "StorageAccessError",
    "TemporaryFileError",
    "UrlAccessError",
]
