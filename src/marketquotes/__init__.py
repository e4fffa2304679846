"""marketquotes — Market quote aggregation and caching layer.

Multi-provider (Yahoo, Finnhub, CoinGecko) with a per-instrument-class
fallback order, a fresh/stale quote cache and a static last-known-good
table, so callers never see a zero or missing price.

Quick start::

    from marketquotes import create_service_from_env
    async with create_service_from_env() as service:
        results = await service.get_quotes(["XAUUSD", "EUR/USD", "BTC"])
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from marketquotes.cache import NoQuoteCache, QuoteCache, QuoteCacheBackend
from marketquotes.config import DEFAULT_STATIC_PRICES, ProviderType, QuoteLayerConfig
from marketquotes.context import build_quote_context
from marketquotes.detection import detect_instrument_type, detect_instruments
from marketquotes.errors import QuoteError, QuoteErrorCode, SymbolTableError
from marketquotes.manager import QuoteService
from marketquotes.models import (
    InstrumentClass,
    ProviderQuote,
    Quote,
    QuoteResult,
    QuoteStatus,
    SymbolMapping,
    format_price,
    summarize,
)
from marketquotes.orchestrator import PROVIDER_PREFERENCE, FallbackOrchestrator
from marketquotes.snapshot import SNAPSHOT_SYMBOLS, MarketSnapshot
from marketquotes.symbols import SYMBOL_TABLE, SymbolResolver, resolve_symbol
from marketquotes.telemetry import HealthCounters

__version__ = "0.1.0"

__all__ = [
    # Service
    "QuoteService",
    "create_service_from_env",
    "MarketSnapshot",
    "SNAPSHOT_SYMBOLS",
    # Config
    "QuoteLayerConfig",
    "ProviderType",
    "DEFAULT_STATIC_PRICES",
    # Errors
    "QuoteError",
    "QuoteErrorCode",
    "SymbolTableError",
    # Symbols and routing
    "SymbolResolver",
    "SYMBOL_TABLE",
    "resolve_symbol",
    "FallbackOrchestrator",
    "PROVIDER_PREFERENCE",
    # Cache and telemetry
    "QuoteCacheBackend",
    "QuoteCache",
    "NoQuoteCache",
    "HealthCounters",
    # Models
    "InstrumentClass",
    "SymbolMapping",
    "ProviderQuote",
    "Quote",
    "QuoteResult",
    "QuoteStatus",
    "format_price",
    "summarize",
    # Prompt context
    "build_quote_context",
    "detect_instruments",
    "detect_instrument_type",
]


def create_service_from_env(env_file: str | os.PathLike[str] | None = None) -> QuoteService:
    """Zero-config factory — reads provider list and API keys from env vars.

    If ``env_file`` is given it is loaded first; variables already set in
    the environment win.

    Environment variables:
        QUOTES_PROVIDERS: Comma-separated provider list
            (default: "yahoo,finnhub,coingecko").
        QUOTES_CACHE: Cache backend — "memory" or "none" (default: "memory").
        QUOTES_REQUEST_TIMEOUT: Per provider call timeout in seconds (default: 5).
        QUOTES_FRESH_TTL: Fresh cache TTL in seconds (default: 3).
        QUOTES_MAX_SYMBOLS: Batch size limit (default: 50).
        FINNHUB_API_KEY: Finnhub API key. Finnhub is skipped without it.
        COINGECKO_API_KEY: Optional CoinGecko demo key.
    """
    if env_file is not None:
        load_dotenv(env_file)

    provider_str = os.getenv("QUOTES_PROVIDERS", "yahoo,finnhub,coingecko")
    provider_types = [
        ProviderType(name.strip().lower())
        for name in provider_str.split(",")
        if name.strip()
    ]

    config = QuoteLayerConfig(
        providers=provider_types,
        cache_backend=os.getenv("QUOTES_CACHE", "memory"),
        request_timeout_seconds=float(os.getenv("QUOTES_REQUEST_TIMEOUT", "5")),
        fresh_ttl_seconds=float(os.getenv("QUOTES_FRESH_TTL", "3")),
        max_symbols=int(os.getenv("QUOTES_MAX_SYMBOLS", "50")),
        finnhub_api_key=os.getenv("FINNHUB_API_KEY"),
        coingecko_api_key=os.getenv("COINGECKO_API_KEY"),
    )

    return QuoteService(config)
