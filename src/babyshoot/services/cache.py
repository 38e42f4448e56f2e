"""TTL cache for read-mostly catalog data."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar

T = TypeVar("T")


class Cache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> object | None:
        """Return a live value or None."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value for ttl_seconds."""

    def invalidate(self, prefix: str = "") -> None:
        """Drop every entry whose key starts with prefix."""


@dataclass
class _Entry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; each serverless instance keeps its own copy."""

    entries: dict[str, _Entry] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            del self.entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self.entries[key] = _Entry(value=value, expires_at=expires_at)

    def invalidate(self, prefix: str = "") -> None:
        for key in [key for key in self.entries if key.startswith(prefix)]:
            del self.entries[key]


def cached(cache: Cache, key: str, ttl_seconds: int, loader: Callable[[], T]) -> T:
    """Return the cached value for key, loading and storing it on a miss."""
    hit = cache.get(key)
    if hit is not None:
        return hit  # type: ignore[return-value]
    value = loader()
    cache.set(key, value, ttl_seconds)
    return value
