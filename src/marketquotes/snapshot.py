"""All-markets board — one shared snapshot of a fixed symbol list.

The snapshot is rebuilt at most once per TTL no matter how many callers ask.
When a rebuild yields no live price at all, the last good snapshot is served
for up to ``stale_ok_seconds``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from marketquotes.errors import QuoteError
from marketquotes.models.result import QuoteResult, QuoteStatus, summarize

if TYPE_CHECKING:
    from marketquotes.manager import QuoteService

logger = logging.getLogger(__name__)

SNAPSHOT_TTL_SECONDS = 60.0
STALE_OK_SECONDS = 30 * 60.0

SNAPSHOT_SYMBOLS: tuple[str, ...] = (
    "BTCUSD", "ETHUSD", "SOLUSD", "XRPUSD", "BNBUSD", "ADAUSD", "DOGEUSD",
    "AAPL", "MSFT", "NVDA", "AMZN", "GOOGL", "META", "TSLA",
    "EURUSD", "GBPUSD", "USDJPY", "USDCHF", "AUDUSD", "USDCAD", "NZDUSD",
    "XAUUSD", "XAGUSD", "WTI", "BRENT",
    "SPX", "NDX", "DJI", "DAX", "FTSE", "NIKKEI",
    "DXY", "US10Y", "VIX",
)

_LIVE_STATUSES = (QuoteStatus.LIVE, QuoteStatus.CACHED)


@dataclass
class Snapshot:
    """One build of the board."""

    results: dict[str, QuoteResult]
    snapshot_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_live_prices(self) -> bool:
        return any(r.status in _LIVE_STATUSES for r in self.results.values())

    def to_dict(self, *, cached: bool, stale: bool = False) -> dict[str, Any]:
        return {
            "success": any(r.available for r in self.results.values()),
            "prices": {symbol: r.to_dict() for symbol, r in self.results.items()},
            "snapshot_timestamp": self.snapshot_timestamp.isoformat(),
            "summary": summarize(self.results),
            "cached": cached,
            "stale": stale,
        }


class MarketSnapshot:
    """Shared, TTL-cached snapshot over a ``QuoteService``.

    Args:
        service: Quote service used to rebuild the board.
        symbols: Symbols on the board.
        ttl_seconds: Age under which the current snapshot is reused.
        stale_ok_seconds: How long a last good snapshot may stand in for a
            failed rebuild.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        service: QuoteService,
        symbols: tuple[str, ...] | list[str] = SNAPSHOT_SYMBOLS,
        ttl_seconds: float = SNAPSHOT_TTL_SECONDS,
        stale_ok_seconds: float = STALE_OK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.service = service
        self.symbols = list(symbols)
        self.ttl_seconds = ttl_seconds
        self.stale_ok_seconds = stale_ok_seconds
        self.clock = clock
        self.builds = 0
        self._current: Snapshot | None = None
        self._current_at = 0.0
        self._last_good: Snapshot | None = None
        self._last_good_at = 0.0
        self._lock = asyncio.Lock()

    def _fresh(self) -> Snapshot | None:
        if self._current is not None and self.clock() - self._current_at < self.ttl_seconds:
            return self._current
        return None

    async def get(self) -> dict[str, Any]:
        """Return the board, rebuilding it if the cached one has expired."""
        current = self._fresh()
        if current is not None:
            return current.to_dict(cached=True)

        async with self._lock:
            # Another caller may have rebuilt while we waited
            current = self._fresh()
            if current is not None:
                return current.to_dict(cached=True)
            return await self._rebuild()

    async def _rebuild(self) -> dict[str, Any]:
        self.builds += 1
        snapshot: Snapshot | None = None
        try:
            snapshot = Snapshot(results=await self.service.get_quotes(self.symbols))
        except QuoteError as exc:
            logger.warning("Market snapshot rebuild failed: %s", exc)

        if snapshot is not None and snapshot.has_live_prices:
            now = self.clock()
            self._current, self._current_at = snapshot, now
            self._last_good, self._last_good_at = snapshot, now
            return snapshot.to_dict(cached=False)

        if self._last_good is not None and self.clock() - self._last_good_at < self.stale_ok_seconds:
            logger.warning(
                "Serving last good market snapshot from %s",
                self._last_good.snapshot_timestamp.isoformat(),
            )
            return self._last_good.to_dict(cached=True, stale=True)

        if snapshot is None:
            return {
                "success": False,
                "prices": {},
                "snapshot_timestamp": None,
                "message": "Market data temporarily unavailable",
                "cached": False,
                "stale": False,
            }
        logger.warning("Market snapshot has no live prices; serving fallbacks")
        return snapshot.to_dict(cached=False, stale=True)

    def invalidate(self) -> None:
        """Drop the current snapshot; the last good one is kept."""
        self._current = None
