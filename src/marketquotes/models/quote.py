"""Quote data models — raw provider output and the normalized quote."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from datetime import datetime

from marketquotes.models.symbol import InstrumentClass


def format_price(value: float | None, decimals: int = 2) -> float | None:
    """Round ``value`` to ``decimals`` places.

    Returns ``None`` for missing or non-finite input. A positive price that
    would round to zero is returned unrounded so a tiny price never turns
    into ``0.0``.
    """
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    rounded = round(number, decimals)
    if number > 0 and rounded <= 0:
        return number
    return rounded


@dataclass(frozen=True)
class ProviderQuote:
    """Uniform output of a provider adapter.

    Attributes:
        provider: Provider name (``yahoo``, ``finnhub``, ...).
        provider_symbol: Identifier the provider was queried with.
        last: Last traded / current price.
        previous_close: The provider's own previous close.
        open: Session open.
        high: Session high.
        low: Session low.
        bid: Best bid, when the provider reports one.
        ask: Best ask, when the provider reports one.
        provider_timestamp: Provider-reported update time.
    """

    provider: str
    provider_symbol: str
    last: float
    previous_close: float | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    bid: float | None = None
    ask: float | None = None
    provider_timestamp: datetime | None = None


@dataclass(frozen=True)
class Quote:
    """Normalized quote snapshot for one canonical symbol.

    Attributes:
        symbol: Canonical symbol.
        name: Display name.
        instrument_class: Price convention.
        last: Last price, always finite and positive.
        bid: Best bid.
        ask: Best ask.
        mid: Bid/ask midpoint, or ``last`` when either side is missing.
        open: Session open.
        high: Session high.
        low: Session low.
        previous_close: Previous close used for ``change``.
        change: Signed change from previous close.
        change_percent: Signed percent change from previous close.
        decimals: Display precision.
        fetched_at: UTC time the quote was fetched.
        source: Provider name, or ``static_fallback``.
        stale: True when served from the stale tier or the static table.
        futures_proxy: True when a futures contract stands in for spot.
        age_seconds: Cache age, set on cache reads.
    """

    symbol: str
    name: str
    instrument_class: InstrumentClass
    last: float
    fetched_at: datetime
    source: str
    bid: float | None = None
    ask: float | None = None
    mid: float | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    previous_close: float | None = None
    change: float | None = None
    change_percent: float | None = None
    decimals: int = 2
    stale: bool = False
    futures_proxy: bool = False
    age_seconds: float | None = None

    @property
    def spread(self) -> float | None:
        """Ask minus bid, when both sides are known."""
        if self.bid is None or self.ask is None:
            return None
        return format_price(self.ask - self.bid, self.decimals + 1)

    @property
    def direction(self) -> str:
        return "down" if (self.change or 0.0) < 0 else "up"

    def with_age(self, age_seconds: float, *, stale: bool | None = None) -> Quote:
        """Copy of this quote annotated with a cache age."""
        return replace(
            self,
            age_seconds=age_seconds,
            stale=self.stale if stale is None else stale,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["instrument_class"] = self.instrument_class.value
        data["fetched_at"] = self.fetched_at.isoformat()
        data["spread"] = self.spread
        data["direction"] = self.direction
        return data
