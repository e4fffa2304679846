"""Finnhub quote provider — broker spot for FX and metals, equities.

Spot instruments use exchange-prefixed identifiers (``OANDA:XAU_USD``,
``BINANCE:BTCUSDT``). Requires an API key; without one the adapter reports
itself disabled and is skipped.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import ProviderQuote
from marketquotes.providers.base import DEFAULT_TIMEOUT_SECONDS, BaseQuoteProvider

QUOTE_URL = "https://finnhub.io/api/v1/quote"


class FinnhubProvider(BaseQuoteProvider):
    """Fetch quotes from Finnhub's ``/quote`` endpoint."""

    name = "finnhub"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key or os.getenv("FINNHUB_API_KEY")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _fetch(self, provider_symbol: str) -> ProviderQuote | None:
        payload = await self._get_json(
            QUOTE_URL,
            params={"symbol": provider_symbol, "token": self.api_key},
        )
        return self.parse(provider_symbol, payload)

    def parse(self, provider_symbol: str, payload: Any) -> ProviderQuote | None:
        if not isinstance(payload, dict):
            raise QuoteError(
                "Finnhub response is not an object",
                code=QuoteErrorCode.MALFORMED_PAYLOAD,
            )
        if payload.get("error"):
            raise QuoteError(
                f"Finnhub error for {provider_symbol}: {payload['error']}",
                code=QuoteErrorCode.PROVIDER_ERROR,
            )

        # Unknown symbols come back as all-zero quotes
        last = self._number(payload.get("c"))
        if last is None:
            raise QuoteError(
                f"Finnhub returned no price for {provider_symbol}",
                code=QuoteErrorCode.NO_DATA,
            )

        return ProviderQuote(
            provider=self.name,
            provider_symbol=provider_symbol,
            last=last,
            previous_close=self._number(payload.get("pc")),
            open=self._number(payload.get("o")),
            high=self._number(payload.get("h")),
            low=self._number(payload.get("l")),
            provider_timestamp=self._timestamp(payload.get("t")),
        )
