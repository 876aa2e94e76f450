"""Configuration for the dimension resolver."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from image_dimensions.constants import (
    CACHE_TTL_DEFAULT,
    HTTP_CONNECT_TIMEOUT_DEFAULT,
    HTTP_HEADERS,
    HTTP_TIMEOUT_DEFAULT,
    REMOTE_READ_BYTES_DEFAULT,
    REMOTE_READ_BYTES_MAX,
    REMOTE_READ_BYTES_MIN,
    STALL_READ_LIMIT,
    STALL_SLEEP_SECONDS,
    SUPPORTED_FORMATS_DEFAULT,
    SVG_MAX_FILE_SIZE_DEFAULT,
)

ENV_PREFIX = "IMAGE_DIMENSIONS_"


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _normalize_formats(formats: Iterable[str]) -> frozenset[str]:
    return frozenset(
        fmt.strip().lower().lstrip(".") for fmt in formats if fmt and fmt.strip()
    )


@dataclass(frozen=True)
class HttpSettings:
    """Transport tuning for remote URL fetches."""

    timeout: float = HTTP_TIMEOUT_DEFAULT
    connect_timeout: float = HTTP_CONNECT_TIMEOUT_DEFAULT
    verify_ssl: bool = True
    follow_redirects: bool = True
    headers: Mapping[str, str] = field(default_factory=lambda: dict(HTTP_HEADERS))


@dataclass(frozen=True)
class ResolverConfig:
    """Immutable resolver configuration.

    Out-of-range values are clamped rather than rejected, so a config built
    from user input is always usable.
    """

    remote_read_bytes: int = REMOTE_READ_BYTES_DEFAULT
    temp_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    enable_cache: bool = True
    cache_ttl: int = CACHE_TTL_DEFAULT
    svg_max_file_size: int = SVG_MAX_FILE_SIZE_DEFAULT
    svg_unit_conversion: bool = False
    supported_formats: frozenset[str] = SUPPORTED_FORMATS_DEFAULT
    http: HttpSettings = field(default_factory=HttpSettings)
    stall_read_limit: int = STALL_READ_LIMIT
    stall_sleep_seconds: float = STALL_SLEEP_SECONDS

    def __post_init__(self) -> None:
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(
            self,
            "remote_read_bytes",
            _clamp(
                int(self.remote_read_bytes),
                REMOTE_READ_BYTES_MIN,
                REMOTE_READ_BYTES_MAX,
            ),
        )
        object.__setattr__(self, "temp_dir", Path(self.temp_dir))
        object.__setattr__(self, "cache_ttl", max(0, int(self.cache_ttl)))
        object.__setattr__(
            self, "svg_max_file_size", max(0, int(self.svg_max_file_size))
        )
        object.__setattr__(
            self, "supported_formats", _normalize_formats(self.supported_formats)
        )
        object.__setattr__(self, "stall_read_limit", max(1, int(self.stall_read_limit)))
        object.__setattr__(
            self, "stall_sleep_seconds", max(0.0, float(self.stall_sleep_seconds))
        )

    def is_supported(self, extension: str) -> bool:
        """Return True when the extension passes the allow-list."""
        if not self.supported_formats:
            return True
        return extension.lower().lstrip(".") in self.supported_formats

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> ResolverConfig:
        """Build a config from option names such as ``svg.max_file_size``.

        Nested mappings (``{"svg": {"max_file_size": 1}}``) and dotted keys
        are both accepted. Unknown keys are ignored.

        Args:
            options: Raw configuration values

        Returns:
            Normalized configuration
        """
        flat = _flatten(options)
        kwargs: dict[str, Any] = {}
        http_kwargs: dict[str, Any] = {}

        if "remote_read_bytes" in flat:
            kwargs["remote_read_bytes"] = int(flat["remote_read_bytes"])
        if flat.get("temp_dir"):
            kwargs["temp_dir"] = Path(flat["temp_dir"])
        if "enable_cache" in flat:
            kwargs["enable_cache"] = _as_bool(flat["enable_cache"])
        if "cache_ttl" in flat:
            kwargs["cache_ttl"] = int(flat["cache_ttl"])
        if "svg.max_file_size" in flat:
            kwargs["svg_max_file_size"] = int(flat["svg.max_file_size"])
        if "svg.unit_conversion" in flat:
            kwargs["svg_unit_conversion"] = _as_bool(flat["svg.unit_conversion"])
        if "supported_formats" in flat:
            raw = flat["supported_formats"]
            if isinstance(raw, str):
                raw = raw.split(",")
            kwargs["supported_formats"] = frozenset(raw or ())
        if "http.timeout" in flat:
            http_kwargs["timeout"] = float(flat["http.timeout"])
        if "http.connect_timeout" in flat:
            http_kwargs["connect_timeout"] = float(flat["http.connect_timeout"])
        if "http.verify_ssl" in flat:
            http_kwargs["verify_ssl"] = _as_bool(flat["http.verify_ssl"])
        if "http.headers" in flat:
            headers = dict(HTTP_HEADERS)
            headers.update(flat["http.headers"])
            http_kwargs["headers"] = headers
        if http_kwargs:
            kwargs["http"] = HttpSettings(**http_kwargs)

        return cls(**kwargs)

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> ResolverConfig:
        """Build a config from ``IMAGE_DIMENSIONS_*`` environment variables.

        ``IMAGE_DIMENSIONS_SVG_MAX_FILE_SIZE`` maps to ``svg.max_file_size``,
        ``IMAGE_DIMENSIONS_HTTP_TIMEOUT`` to ``http.timeout`` and so on.
        """
        if dotenv:
            load_dotenv()

        names = {
            "REMOTE_READ_BYTES": "remote_read_bytes",
            "TEMP_DIR": "temp_dir",
            "ENABLE_CACHE": "enable_cache",
            "CACHE_TTL": "cache_ttl",
            "SVG_MAX_FILE_SIZE": "svg.max_file_size",
            "SVG_UNIT_CONVERSION": "svg.unit_conversion",
            "SUPPORTED_FORMATS": "supported_formats",
            "HTTP_TIMEOUT": "http.timeout",
            "HTTP_CONNECT_TIMEOUT": "http.connect_timeout",
            "HTTP_VERIFY_SSL": "http.verify_ssl",
        }
        options: dict[str, Any] = {}
        for env_name, option in names.items():
            value = os.getenv(f"{ENV_PREFIX}{env_name}")
            if value is not None:
                options[option] = value
        return cls.from_mapping(options)


def _flatten(options: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in options.items():
        name = f"{prefix}{key}"
        # http.headers is a mapping value, not a section.
        if isinstance(value, Mapping) and name != "http.headers":
            flat.update(_flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


__all__ = ["ENV_PREFIX", "HttpSettings", "ResolverConfig"]
