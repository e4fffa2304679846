"""Yahoo Finance chart provider — broad coverage, no API key.

Covers futures (``GC=F``), indices (``^GSPC``), FX (``EURUSD=X``), crypto
(``BTC-USD``) and equities. For spot metals it only carries the futures
contract, which the symbol table marks as a proxy.
"""

from __future__ import annotations

from typing import Any

from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import ProviderQuote
from marketquotes.providers.base import BaseQuoteProvider

CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"

_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; marketquotes)"}


class YahooProvider(BaseQuoteProvider):
    """Fetch the latest price from Yahoo's chart endpoint."""

    name = "yahoo"

    async def _fetch(self, provider_symbol: str) -> ProviderQuote | None:
        payload = await self._get_json(
            CHART_URL.format(symbol=provider_symbol),
            params={"interval": "1m", "range": "1d"},
            headers=_HEADERS,
        )
        return self.parse(provider_symbol, payload)

    def parse(self, provider_symbol: str, payload: Any) -> ProviderQuote | None:
        """Turn a chart response into a ``ProviderQuote``."""
        chart = payload.get("chart") if isinstance(payload, dict) else None
        if not isinstance(chart, dict):
            raise QuoteError(
                "Yahoo response has no chart section",
                code=QuoteErrorCode.MALFORMED_PAYLOAD,
            )

        if chart.get("error"):
            raise QuoteError(
                f"Yahoo chart error for {provider_symbol}: {chart['error']}",
                code=QuoteErrorCode.NOT_FOUND,
            )

        results = chart.get("result") or []
        if not results:
            raise QuoteError(
                f"Yahoo returned no result for {provider_symbol}",
                code=QuoteErrorCode.NO_DATA,
            )

        first = results[0] if isinstance(results, list) else None
        meta = first.get("meta") if isinstance(first, dict) else None
        if not isinstance(meta, dict):
            raise QuoteError(
                f"Yahoo result for {provider_symbol} has no meta section",
                code=QuoteErrorCode.MALFORMED_PAYLOAD,
            )
        last = self._number(meta.get("regularMarketPrice"))
        if last is None:
            raise QuoteError(
                f"Yahoo returned no price for {provider_symbol}",
                code=QuoteErrorCode.NO_DATA,
            )

        previous_close = self._number(meta.get("previousClose")) or self._number(
            meta.get("chartPreviousClose")
        )
        timestamp = self._timestamp(meta.get("regularMarketTime"))

        return ProviderQuote(
            provider=self.name,
            provider_symbol=provider_symbol,
            last=last,
            previous_close=previous_close,
            open=self._number(meta.get("regularMarketOpen")),
            high=self._number(meta.get("regularMarketDayHigh")),
            low=self._number(meta.get("regularMarketDayLow")),
            bid=self._number(meta.get("bid")),
            ask=self._number(meta.get("ask")),
            provider_timestamp=timestamp,
        )
