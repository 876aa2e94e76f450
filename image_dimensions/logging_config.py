"""Console logging for the resolver.

The library never configures logging on import; applications call
:func:`configure_logging` when they want to see what the resolver reads,
falls back on, or gives up on.
"""

from __future__ import annotations

import logging
import os
from typing import Final, TextIO

LOGGER_NAME: Final[str] = "image_dimensions"

# Level lookup order; the package-specific variable wins.
LEVEL_ENV_VARS: Final[tuple[str, ...]] = ("IMAGE_DIMENSIONS_LOG_LEVEL", "LOG_LEVEL")

_FORMAT: Final[str] = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
_DEBUG_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)-7s [%(name)s:%(lineno)d] %(message)s"
)
_DATEFMT: Final[str] = "%H:%M:%S"


def _level_from(value: str | int | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value

    value = value.strip()
    if value.isdigit():
        return int(value)
    numeric = logging.getLevelName(value.upper())
    return numeric if isinstance(numeric, int) else default


def _env_level() -> str | None:
    for name in LEVEL_ENV_VARS:
        value = os.getenv(name)
        if value:
            return value
    return None


def configure_logging(
    *,
    debug: bool = False,
    level: str | int | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a console handler to the ``image_dimensions`` logger.

    Args:
        debug: Default to DEBUG and include line numbers in records
        level: Explicit level; overrides the environment
        stream: Target stream (stderr when omitted)

    Returns:
        The configured package logger

    Repeated calls reuse the handler installed by the first call and only
    update its level, format and stream.
    """
    default = logging.DEBUG if debug else logging.INFO
    resolved = _level_from(level if level is not None else _env_level(), default)

    logger = logging.getLogger(LOGGER_NAME)
    handler = next(
        (h for h in logger.handlers if getattr(h, "_image_dimensions", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream)
        handler._image_dimensions = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)

    fmt = _DEBUG_FORMAT if debug else _FORMAT
    handler.setFormatter(logging.Formatter(fmt, _DATEFMT))
    logger.setLevel(resolved)
    logger.propagate = False
    return logger


__all__ = ["LEVEL_ENV_VARS", "LOGGER_NAME", "configure_logging"]
