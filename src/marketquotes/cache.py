"""Quote cache — fresh tier and stale-fallback reads over one in-memory store."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from marketquotes.models.quote import Quote

DEFAULT_FRESH_TTL_SECONDS = 3.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached quote and the cache-clock time it was written."""

    quote: Quote
    inserted_at: float


class QuoteCacheBackend(ABC):
    """Abstract quote cache interface."""

    @abstractmethod
    def write_through(self, symbol: str, quote: Quote) -> None:
        """Store ``quote`` under ``symbol``, replacing any previous entry."""
        ...

    @abstractmethod
    def read_fresh(self, symbol: str) -> Quote | None:
        """Return the cached quote if younger than the fresh TTL, else None."""
        ...

    @abstractmethod
    def read_stale_fallback(self, symbol: str) -> Quote | None:
        """Return the latest cached quote of any age, marked stale."""
        ...

    @abstractmethod
    def clear(self, symbol: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...

    def symbols(self) -> list[str]:
        return []

    def __len__(self) -> int:
        return 0


class NoQuoteCache(QuoteCacheBackend):
    """No-op cache — always misses."""

    def write_through(self, symbol, quote):  # type: ignore[override]
        pass

    def read_fresh(self, symbol):  # type: ignore[override]
        return None

    def read_stale_fallback(self, symbol):  # type: ignore[override]
        return None

    def clear(self, symbol):  # type: ignore[override]
        pass

    def clear_all(self):
        pass


class QuoteCache(QuoteCacheBackend):
    """In-memory quote cache keyed by canonical symbol.

    Entries are never evicted: the stale tier is the same store read without
    an age limit. Writes are last-write-wins.

    Args:
        fresh_ttl_seconds: Age under which ``read_fresh`` returns an entry.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        fresh_ttl_seconds: float = DEFAULT_FRESH_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fresh_ttl = fresh_ttl_seconds
        self.clock = clock
        self._store: dict[str, CacheEntry] = {}

    @staticmethod
    def _key(symbol: str) -> str:
        return symbol.upper()

    def write_through(self, symbol: str, quote: Quote) -> None:
        self._store[self._key(symbol)] = CacheEntry(quote=quote, inserted_at=self.clock())

    def age(self, symbol: str) -> float | None:
        """Seconds since ``symbol`` was last written, or None if absent."""
        entry = self._store.get(self._key(symbol))
        if entry is None:
            return None
        return max(0.0, self.clock() - entry.inserted_at)

    def read_fresh(self, symbol: str) -> Quote | None:
        entry = self._store.get(self._key(symbol))
        if entry is None:
            return None
        age = max(0.0, self.clock() - entry.inserted_at)
        if age >= self.fresh_ttl:
            return None
        return entry.quote.with_age(round(age, 3))

    def read_stale_fallback(self, symbol: str) -> Quote | None:
        entry = self._store.get(self._key(symbol))
        if entry is None:
            return None
        age = max(0.0, self.clock() - entry.inserted_at)
        return entry.quote.with_age(round(age, 3), stale=True)

    def clear(self, symbol: str) -> None:
        self._store.pop(self._key(symbol), None)

    def clear_all(self) -> None:
        self._store.clear()

    def symbols(self) -> list[str]:
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)


def create_cache(backend: str, fresh_ttl_seconds: float = DEFAULT_FRESH_TTL_SECONDS) -> QuoteCacheBackend:
    """Build the cache named by ``QuoteLayerConfig.cache_backend``."""
    if backend == "memory":
        return QuoteCache(fresh_ttl_seconds=fresh_ttl_seconds)
    if backend == "none":
        return NoQuoteCache()
    raise ValueError(f"Unknown cache backend: {backend!r}")
