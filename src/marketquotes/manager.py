"""QuoteService — batch coordinator: cache -> providers -> stale -> static."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import httpx

from marketquotes.cache import QuoteCacheBackend, create_cache
from marketquotes.config import ProviderType, QuoteLayerConfig
from marketquotes.context import build_quote_context
from marketquotes.detection import detect_instruments
from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import Quote, format_price
from marketquotes.models.result import QuoteResult, QuoteStatus
from marketquotes.models.symbol import SymbolMapping
from marketquotes.orchestrator import FallbackOrchestrator
from marketquotes.providers import create_provider
from marketquotes.providers.base import BaseQuoteProvider
from marketquotes.quality import is_valid_price
from marketquotes.symbols import SymbolResolver
from marketquotes.telemetry import HealthCounters

logger = logging.getLogger(__name__)

STATIC_SOURCE = "static_fallback"


def static_quote(mapping: SymbolMapping, price: float) -> Quote:
    """Quote built from the static last-known-good table. Always stale."""
    last = format_price(price, mapping.decimals)
    return Quote(
        symbol=mapping.symbol,
        name=mapping.display_name,
        instrument_class=mapping.instrument_class,
        last=last,  # type: ignore[arg-type]
        mid=last,
        change=0.0,
        change_percent=0.0,
        decimals=mapping.decimals,
        fetched_at=datetime.now(timezone.utc),
        source=STATIC_SOURCE,
        stale=True,
    )


class QuoteService:
    """Central coordinator for quote lookups.

    Each symbol runs its own pipeline (fresh cache, then providers in class
    order) under a deadline. A symbol that cannot be priced live falls back
    to the stale cache, then the static table, and only then comes back as
    unavailable. A failure in one symbol never affects another.

    Usage::

        async with QuoteService(QuoteLayerConfig()) as service:
            results = await service.get_quotes(["gold", "EUR/USD", "BTC"])
            context = await service.get_context(["XAUUSD"])
    """

    def __init__(
        self,
        config: QuoteLayerConfig | None = None,
        providers: Iterable[BaseQuoteProvider] | None = None,
        cache: QuoteCacheBackend | None = None,
        telemetry: HealthCounters | None = None,
        resolver: SymbolResolver | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or QuoteLayerConfig()
        self.resolver = resolver if resolver is not None else SymbolResolver()
        self.telemetry = telemetry if telemetry is not None else HealthCounters()
        self.cache = cache if cache is not None else create_cache(
            self.config.cache_backend, self.config.fresh_ttl_seconds,
        )

        self._owns_client = False
        self.client = client
        if providers is None:
            if self.client is None:
                self.client = httpx.AsyncClient(timeout=self.config.request_timeout_seconds)
                self._owns_client = True
            providers = self._build_providers()

        self.providers: dict[str, BaseQuoteProvider] = {p.name: p for p in providers}
        self.orchestrator = FallbackOrchestrator(self.providers)

    def _build_providers(self) -> list[BaseQuoteProvider]:
        built: list[BaseQuoteProvider] = []
        for pt in self.config.providers:
            kwargs: dict[str, Any] = {"timeout": self.config.request_timeout_seconds}
            if pt is not ProviderType.MOCK:
                kwargs["client"] = self.client
            if pt is ProviderType.FINNHUB and self.config.finnhub_api_key:
                kwargs["api_key"] = self.config.finnhub_api_key
            elif pt is ProviderType.COINGECKO and self.config.coingecko_api_key:
                kwargs["api_key"] = self.config.coingecko_api_key
            provider = create_provider(pt, **kwargs)
            if not provider.enabled:
                logger.info("Provider %s is disabled (missing configuration)", provider.name)
            built.append(provider)
        return built

    # ------------------------------------------------------------- lifecycle

    async def aclose(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def __aenter__(self) -> QuoteService:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---------------------------------------------------------------- quotes

    async def get_quote(self, symbol: str) -> QuoteResult:
        """Quote one symbol. Never raises."""
        return await self._run(self.resolver.resolve(symbol))

    async def get_quotes(self, symbols: Iterable[str]) -> dict[str, QuoteResult]:
        """Quote many symbols concurrently, keyed by canonical symbol.

        Blank entries are ignored and aliases of the same instrument are
        fetched once. Keys keep first-seen order.

        Raises:
            QuoteError: ``TOO_MANY_SYMBOLS`` when more than
                ``config.max_symbols`` symbols are requested.
        """
        requested = [s for s in symbols if s and str(s).strip()]
        if len(requested) > self.config.max_symbols:
            raise QuoteError(
                f"Requested {len(requested)} symbols; at most "
                f"{self.config.max_symbols} are allowed per batch",
                code=QuoteErrorCode.TOO_MANY_SYMBOLS,
            )

        mappings: dict[str, SymbolMapping] = {}
        for raw in requested:
            mapping = self.resolver.resolve(raw)
            if mapping.symbol and mapping.symbol not in mappings:
                mappings[mapping.symbol] = mapping

        if not mappings:
            return {}

        results = await asyncio.gather(*(self._run(m) for m in mappings.values()))
        return dict(zip(mappings, results))

    fetch_many = get_quotes

    # ------------------------------------------------------------- pipeline

    async def _run(self, mapping: SymbolMapping) -> QuoteResult:
        self.telemetry.record_request()
        started = time.perf_counter()
        result = await self._attempt(mapping, started)
        self.telemetry.record_latency(_elapsed_ms(started))
        return result

    async def _attempt(self, mapping: SymbolMapping, started: float) -> QuoteResult:
        if not mapping.symbol:
            self.telemetry.record_unavailable()
            return QuoteResult.unavailable("", "No symbol provided")

        try:
            return await asyncio.wait_for(
                self._pipeline(mapping, started), timeout=self.config.deadline_seconds,
            )
        except asyncio.TimeoutError:
            self.telemetry.record_deadline()
            logger.warning(
                "Deadline of %.1fs exceeded for %s", self.config.deadline_seconds, mapping.symbol,
            )
            return self._fallback(
                mapping, f"Timed out after {self.config.deadline_seconds:g}s", started,
            )
        except Exception:
            self.telemetry.record_error()
            logger.exception("Unexpected error while quoting %s", mapping.symbol)
            return self._fallback(mapping, "Internal error while fetching quote", started)

    async def _pipeline(self, mapping: SymbolMapping, started: float) -> QuoteResult:
        cached = self.cache.read_fresh(mapping.symbol)
        if cached is not None:
            self.telemetry.record_cache_hit()
            logger.debug("Cache hit for %s (age %.2fs)", mapping.symbol, cached.age_seconds or 0.0)
            return QuoteResult.of(cached, QuoteStatus.CACHED, _elapsed_ms(started))

        quote = await self.orchestrator.fetch_quote(mapping)
        if quote is not None:
            self.cache.write_through(mapping.symbol, quote)
            self.telemetry.record_success()
            return QuoteResult.of(quote, QuoteStatus.LIVE, _elapsed_ms(started))

        self.telemetry.record_error()
        return self._fallback(mapping, "All providers failed", started)

    def _fallback(self, mapping: SymbolMapping, reason: str, started: float) -> QuoteResult:
        # Another pipeline may have refreshed the entry since the first read
        fresh = self.cache.read_fresh(mapping.symbol)
        if fresh is not None:
            self.telemetry.record_cache_hit()
            logger.info("Serving %s quote for %s written during this request", fresh.source, mapping.symbol)
            return QuoteResult.of(fresh, QuoteStatus.CACHED, _elapsed_ms(started))

        stale = self.cache.read_stale_fallback(mapping.symbol)
        if stale is not None:
            self.telemetry.record_stale()
            logger.warning(
                "Serving stale %s quote for %s (age %.1fs): %s",
                stale.source, mapping.symbol, stale.age_seconds or 0.0, reason,
            )
            return QuoteResult.of(stale, QuoteStatus.STALE, _elapsed_ms(started))

        price = self.config.static_prices.get(mapping.symbol)
        if is_valid_price(price):
            self.telemetry.record_static()
            logger.warning("Serving static price for %s: %s", mapping.symbol, reason)
            return QuoteResult.of(
                static_quote(mapping, price), QuoteStatus.STATIC, _elapsed_ms(started),  # type: ignore[arg-type]
            )

        self.telemetry.record_unavailable()
        return QuoteResult.unavailable(mapping.symbol, reason, latency_ms=_elapsed_ms(started))

    # --------------------------------------------------------------- context

    async def get_context(self, symbols: Iterable[str]) -> dict[str, Any]:
        """Quote ``symbols`` and wrap them in the prompt context shape."""
        results = await self.get_quotes(symbols)
        return build_quote_context(results, self.config.live_threshold_seconds)

    async def context_for_message(self, message: str) -> dict[str, Any] | None:
        """Context for the instruments mentioned in ``message``, or None."""
        symbols = detect_instruments(message, self.resolver)
        if not symbols:
            return None
        return await self.get_context(symbols[: self.config.max_symbols])

    # ----------------------------------------------------------- management

    def health(self) -> dict[str, Any]:
        data = self.telemetry.snapshot()
        data["cached_symbols"] = len(self.cache)
        data["providers"] = {name: p.enabled for name, p in self.providers.items()}
        return data

    def clear_cache(self, symbol: str | None = None) -> None:
        if symbol is None:
            self.cache.clear_all()
        else:
            self.cache.clear(self.resolver.canonical(symbol))


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
