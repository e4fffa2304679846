"""CoinGecko provider — aggregated crypto spot prices.

Identifiers are CoinGecko coin ids (``bitcoin``, ``ethereum``). Works
without a key on the public tier; a demo key raises the rate limit.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import ProviderQuote
from marketquotes.providers.base import DEFAULT_TIMEOUT_SECONDS, BaseQuoteProvider

PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"


class CoinGeckoProvider(BaseQuoteProvider):
    """Fetch USD spot prices from CoinGecko's ``simple/price`` endpoint."""

    name = "coingecko"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key or os.getenv("COINGECKO_API_KEY")

    async def _fetch(self, provider_symbol: str) -> ProviderQuote | None:
        headers = {"x-cg-demo-api-key": self.api_key} if self.api_key else None
        payload = await self._get_json(
            PRICE_URL,
            params={
                "ids": provider_symbol,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
            },
            headers=headers,
        )
        return self.parse(provider_symbol, payload)

    def parse(self, provider_symbol: str, payload: Any) -> ProviderQuote | None:
        if not isinstance(payload, dict):
            raise QuoteError(
                "CoinGecko response is not an object",
                code=QuoteErrorCode.MALFORMED_PAYLOAD,
            )

        coin = payload.get(provider_symbol)
        if not isinstance(coin, dict):
            raise QuoteError(
                f"CoinGecko has no entry for {provider_symbol}",
                code=QuoteErrorCode.NOT_FOUND,
            )

        last = self._number(coin.get("usd"))
        if last is None:
            raise QuoteError(
                f"CoinGecko returned no USD price for {provider_symbol}",
                code=QuoteErrorCode.NO_DATA,
            )

        # Only a 24h percent change is reported; back out the reference price
        previous_close = None
        change_pct = coin.get("usd_24h_change")
        if isinstance(change_pct, (int, float)) and change_pct > -100:
            previous_close = last / (1 + change_pct / 100)

        return ProviderQuote(
            provider=self.name,
            provider_symbol=provider_symbol,
            last=last,
            previous_close=previous_close,
        )
