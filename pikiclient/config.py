"""Application settings and the shared HTTP session setup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import requests

REFERER = "https://app-api.pixiv.net/"

# The largest cache size setting means "no limit".
UNLIMITED_CACHE_SIZE = 8
UNLIMITED_CACHE_BYTES = 9223372036854775807

_GIBIBYTE = 1024**3


@dataclass
class PikiConfig:
    """User settings: where cached data lives and how large the cache may grow."""

    cache_path: Path
    cache_size: int = 0

    def __post_init__(self) -> None:
        self.cache_path = Path(self.cache_path)

    @property
    def database_path(self) -> Path:
        """Location of the SQLite cache database."""
        return self.cache_path / "data.sqlite"

    @property
    def cache_limit(self) -> int:
        """Maximum size of the network cache in bytes."""
        return cache_limit(self.cache_size)


def cache_limit(cache_size: int) -> int:
    """Return the network cache limit in bytes for a cache size setting.

    A setting of ``n`` allows ``2**n`` GiB; the setting 8 removes the limit.
    """
    if cache_size < 0:
        raise ValueError(f"cache size setting must not be negative: {cache_size}")
    if cache_size == UNLIMITED_CACHE_SIZE:
        return UNLIMITED_CACHE_BYTES
    return 2**cache_size * _GIBIBYTE


def network_cache_dir(config: PikiConfig) -> Path:
    """Directory holding cached network responses."""
    return config.cache_path / "cache"


def make_session() -> requests.Session:
    """Create an HTTP session that sends the Referer the image servers require."""
    session = requests.Session()
    session.headers["Referer"] = REFERER
    return session