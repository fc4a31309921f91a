"""Cache adapter capability and the store the executor talks to."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from typing import Protocol, TypeVar

from powopy.errors import ConfigurationError

T = TypeVar("T")

CacheOptions = Mapping[str, object]


class CacheAdapter(Protocol):
    def fetch(self, key: str, compute: Callable[[], T], options: CacheOptions | None = None) -> T: ...


class NullCache:
    """Adapter used when no cache is configured: every fetch computes."""

    def fetch(self, key: str, compute: Callable[[], T], options: CacheOptions | None = None) -> T:
        del key, options
        return compute()


class MemoryCache:
    """Process-local adapter with optional expiry and size bound.

    Honours an ``expires_in`` option (seconds). Expired entries are purged on
    every insert, and once ``max_entries`` is reached the oldest entry is
    evicted. Concurrent misses on the same key each compute; there is no
    single-flight deduplication.
    """

    def __init__(
        self,
        *,
        default_ttl: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ConfigurationError("max_entries must be at least 1")
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float | None, object]] = {}
        self._lock = threading.Lock()

    def fetch(self, key: str, compute: Callable[[], T], options: CacheOptions | None = None) -> T:
        ttl = self._ttl(options)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                expires_at, value = entry
                if expires_at is None or expires_at > now:
                    return value  # type: ignore[return-value]
                del self._entries[key]

        value = compute()
        now = self._clock()
        expires_at = None if ttl is None else now + ttl
        with self._lock:
            self._purge_expired(now)
            # Re-inserting moves the key to the end of the eviction order.
            self._entries.pop(key, None)
            if self.max_entries is not None:
                while len(self._entries) >= self.max_entries:
                    del self._entries[next(iter(self._entries))]
            self._entries[key] = (expires_at, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [
            key
            for key, (expires_at, _) in self._entries.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._entries[key]

    def _ttl(self, options: CacheOptions | None) -> float | None:
        raw = (options or {}).get("expires_in", self.default_ttl)
        if raw is None:
            return None
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ConfigurationError(
                f"expires_in must be a number of seconds, got {raw!r}",
                hint="Set cache_options.expires_in to an integer or float.",
            )
        return float(raw)


class CacheStore:
    def __init__(self, adapter: CacheAdapter | None = None) -> None:
        self.adapter: CacheAdapter = adapter if adapter is not None else NullCache()

    def fetch(self, key: str, compute: Callable[[], T], options: CacheOptions | None = None) -> T:
        return self.adapter.fetch(key, compute, options or None)
