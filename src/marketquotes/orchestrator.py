"""Fallback orchestrator — per-class provider order, first valid quote wins."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from marketquotes.models.quote import ProviderQuote, Quote, format_price
from marketquotes.models.symbol import InstrumentClass, SymbolMapping
from marketquotes.quality import validate_quote

if TYPE_CHECKING:
    from marketquotes.providers.base import BaseQuoteProvider

logger = logging.getLogger(__name__)

# Feeds per class, most venue-faithful first: broker spot for FX and metals,
# the aggregator for crypto, the general chart feed for exchange-listed
# instruments.
PROVIDER_PREFERENCE: dict[InstrumentClass, tuple[str, ...]] = {
    InstrumentClass.CRYPTO: ("coingecko", "finnhub", "yahoo"),
    InstrumentClass.SPOT_FX: ("finnhub", "yahoo"),
    InstrumentClass.FUTURES: ("yahoo",),
    InstrumentClass.INDEX: ("yahoo",),
    InstrumentClass.EQUITY: ("yahoo", "finnhub"),
    InstrumentClass.UNKNOWN: ("yahoo", "finnhub"),
}


def provider_order(
    instrument_class: InstrumentClass,
    preference: Mapping[InstrumentClass, tuple[str, ...]] | None = None,
) -> tuple[str, ...]:
    table = PROVIDER_PREFERENCE if preference is None else preference
    return table.get(instrument_class, table[InstrumentClass.UNKNOWN])


def build_quote(
    raw: ProviderQuote,
    mapping: SymbolMapping,
    fetched_at: datetime | None = None,
) -> Quote:
    """Normalize adapter output into a ``Quote`` for ``mapping``.

    Change and percent change are computed against the provider's own
    previous close; without one they are zero.
    """
    decimals = mapping.decimals
    previous_close = raw.previous_close if raw.previous_close else raw.last
    change = raw.last - previous_close
    change_percent = (change / previous_close) * 100 if previous_close else 0.0

    if raw.bid is not None and raw.ask is not None:
        mid = (raw.bid + raw.ask) / 2
    else:
        mid = raw.last

    return Quote(
        symbol=mapping.symbol,
        name=mapping.display_name,
        instrument_class=mapping.instrument_class,
        last=format_price(raw.last, decimals),  # type: ignore[arg-type]
        bid=format_price(raw.bid, decimals),
        ask=format_price(raw.ask, decimals),
        mid=format_price(mid, decimals),
        open=format_price(raw.open, decimals),
        high=format_price(raw.high, decimals),
        low=format_price(raw.low, decimals),
        previous_close=format_price(previous_close, decimals),
        change=round(change, decimals),
        change_percent=round(change_percent, 2),
        decimals=decimals,
        fetched_at=fetched_at or datetime.now(timezone.utc),
        source=raw.provider,
        futures_proxy=mapping.is_futures_proxy(raw.provider),
    )


class FallbackOrchestrator:
    """Try providers strictly in class order until one returns a valid quote.

    Providers for a single symbol are never queried in parallel.
    """

    def __init__(
        self,
        providers: Mapping[str, BaseQuoteProvider],
        preference: Mapping[InstrumentClass, tuple[str, ...]] | None = None,
    ) -> None:
        self.providers = dict(providers)
        self.preference = dict(PROVIDER_PREFERENCE if preference is None else preference)

    def order_for(self, mapping: SymbolMapping) -> list[str]:
        """Provider names that will actually be tried for ``mapping``."""
        names: list[str] = []
        for name in provider_order(mapping.instrument_class, self.preference):
            provider = self.providers.get(name)
            if provider is None or not provider.enabled:
                continue
            if not mapping.provider_id(name):
                continue
            names.append(name)
        return names

    async def fetch_quote(self, mapping: SymbolMapping) -> Quote | None:
        """Return the first valid quote, or ``None`` once the order is exhausted."""
        tried: list[str] = []
        for name in self.order_for(mapping):
            provider_symbol = mapping.provider_id(name)
            tried.append(name)
            raw = await self.providers[name].fetch(provider_symbol)  # type: ignore[arg-type]
            if raw is None:
                continue

            quote = build_quote(raw, mapping)
            if not validate_quote(quote):
                logger.info("Discarding %s quote for %s: last=%r", name, mapping.symbol, quote.last)
                continue
            if quote.futures_proxy:
                logger.debug(
                    "%s served from futures proxy %s via %s",
                    mapping.symbol, provider_symbol, name,
                )
            return quote

        if tried:
            logger.info("All providers exhausted for %s (tried: %s)", mapping.symbol, ", ".join(tried))
        else:
            logger.debug("No provider carries %s", mapping.symbol or "<empty>")
        return None
