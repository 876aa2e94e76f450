from __future__ import annotations

from pathlib import Path

import pytest

from image_dimensions import HttpSettings, ResolverConfig


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(0, 8192), (100, 8192), (65536, 65536), (5_000_000, 1_048_576)],
)
def test_remote_read_bytes_is_clamped(requested: int, expected: int) -> None:
    assert ResolverConfig(remote_read_bytes=requested).remote_read_bytes == expected


def test_defaults() -> None:
    config = ResolverConfig()
    assert config.remote_read_bytes == 131072
    assert config.enable_cache is True
    assert config.cache_ttl == 3600
    assert config.svg_max_file_size == 10 * 1024 * 1024
    assert config.svg_unit_conversion is False
    assert "avif" in config.supported_formats
    assert config.http == HttpSettings()
    assert config.http.timeout == 60.0
    assert config.http.connect_timeout == 10.0
    assert config.http.verify_ssl is True


def test_config_is_immutable() -> None:
    config = ResolverConfig()
    with pytest.raises(AttributeError):
        config.remote_read_bytes = 1  # type: ignore[misc]


def test_supported_formats_are_normalized() -> None:
    config = ResolverConfig(supported_formats={".PNG", " jpg ", ""})
    assert config.supported_formats == frozenset({"png", "jpg"})
    assert config.is_supported(".png")
    assert not config.is_supported("gif")


def test_empty_supported_formats_is_unrestricted() -> None:
    assert ResolverConfig(supported_formats=()).is_supported("tiff")


def test_negative_values_are_clamped() -> None:
    config = ResolverConfig(cache_ttl=-5, svg_max_file_size=-1)
    assert config.cache_ttl == 0
    assert config.svg_max_file_size == 0


def test_from_mapping_nested_and_dotted(tmp_path: Path) -> None:
    config = ResolverConfig.from_mapping(
        {
            "remote_read_bytes": 1024,
            "temp_dir": str(tmp_path),
            "enable_cache": "false",
            "svg": {"max_file_size": 2048, "unit_conversion": True},
            "http.timeout": 5,
            "http": {"verify_ssl": False, "headers": {"X-Test": "1"}},
            "supported_formats": "png,svg",
            "unknown": "ignored",
        }
    )
    assert config.remote_read_bytes == 8192
    assert config.temp_dir == tmp_path
    assert config.enable_cache is False
    assert config.svg_max_file_size == 2048
    assert config.svg_unit_conversion is True
    assert config.http.timeout == 5.0
    assert config.http.verify_ssl is False
    assert config.http.headers["X-Test"] == "1"
    assert "User-Agent" in config.http.headers
    assert config.supported_formats == frozenset({"png", "svg"})


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("IMAGE_DIMENSIONS_REMOTE_READ_BYTES", "16384")
    monkeypatch.setenv("IMAGE_DIMENSIONS_TEMP_DIR", str(tmp_path))
    monkeypatch.setenv("IMAGE_DIMENSIONS_ENABLE_CACHE", "0")
    monkeypatch.setenv("IMAGE_DIMENSIONS_HTTP_CONNECT_TIMEOUT", "2.5")

    config = ResolverConfig.from_env(dotenv=False)

    assert config.remote_read_bytes == 16384
    assert config.temp_dir == tmp_path
    assert config.enable_cache is False
    assert config.http.connect_timeout == 2.5
    assert config.http.timeout == 60.0
