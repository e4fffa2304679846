"""Quote layer configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProviderType(Enum):
    """Supported quote provider backends."""

    YAHOO = "yahoo"
    FINNHUB = "finnhub"
    COINGECKO = "coingecko"
    MOCK = "mock"


# Last-known-good prices served when no live fetch and no cached quote exist.
# Accuracy is not the point; a known symbol must never render as 0.00.
DEFAULT_STATIC_PRICES: dict[str, float] = {
    # Crypto
    "BTCUSD": 98500.0,
    "ETHUSD": 3450.0,
    "SOLUSD": 185.0,
    "XRPUSD": 2.35,
    "BNBUSD": 685.0,
    "ADAUSD": 0.95,
    "DOGEUSD": 0.32,
    # FX
    "EURUSD": 1.0420,
    "GBPUSD": 1.2210,
    "USDJPY": 155.50,
    "USDCHF": 0.9150,
    "AUDUSD": 0.6280,
    "USDCAD": 1.4350,
    "NZDUSD": 0.5680,
    # Metals / energy
    "XAUUSD": 2755.0,
    "XAGUSD": 30.85,
    "GC": 2770.0,
    "WTI": 74.50,
    "BRENT": 78.20,
    # Indices / rates
    "SPX": 6050.0,
    "NDX": 21500.0,
    "DJI": 44200.0,
    "DAX": 21200.0,
    "FTSE": 8520.0,
    "NIKKEI": 39800.0,
    "DXY": 108.5,
    "US10Y": 4.65,
    "VIX": 16.5,
    # Equities
    "AAPL": 232.0,
    "MSFT": 448.0,
    "NVDA": 138.0,
    "AMZN": 235.0,
    "GOOGL": 198.0,
    "META": 625.0,
    "TSLA": 395.0,
}


@dataclass
class QuoteLayerConfig:
    """Configuration for QuoteService.

    Attributes:
        providers: Provider backends to construct. Order here does not decide
            fetch order; that comes from the per-class preference table.
        cache_backend: Cache type — "memory" or "none".
        request_timeout_seconds: Per provider call timeout.
        deadline_buffer_seconds: Added to the provider timeout to form the
            per-symbol pipeline deadline.
        fresh_ttl_seconds: Age under which a cached quote is served as-is.
        max_symbols: Upper bound on symbols per batch request.
        live_threshold_seconds: Age beyond which a quote is reported as stale
            in the prompt context.
        finnhub_api_key: Finnhub API key. Without it the adapter is disabled.
        coingecko_api_key: Optional CoinGecko demo/pro key.
        static_prices: Canonical symbol -> last-known-good price.
    """

    providers: list[ProviderType] = field(
        default_factory=lambda: [
            ProviderType.YAHOO,
            ProviderType.FINNHUB,
            ProviderType.COINGECKO,
        ]
    )
    cache_backend: str = "memory"
    request_timeout_seconds: float = 5.0
    deadline_buffer_seconds: float = 1.0
    fresh_ttl_seconds: float = 3.0
    max_symbols: int = 50
    live_threshold_seconds: float = 15.0

    finnhub_api_key: str | None = None
    coingecko_api_key: str | None = None
    static_prices: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_STATIC_PRICES)
    )

    @property
    def deadline_seconds(self) -> float:
        """Per-symbol pipeline deadline inside a batch."""
        return self.request_timeout_seconds + self.deadline_buffer_seconds
