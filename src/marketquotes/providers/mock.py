"""Mock provider for testing and CI — no network, no API keys."""

from __future__ import annotations

import asyncio

from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import ProviderQuote
from marketquotes.providers.base import DEFAULT_TIMEOUT_SECONDS, BaseQuoteProvider


class MockProvider(BaseQuoteProvider):
    """In-memory provider that returns configurable quotes.

    Use ``set_quote`` / ``set_price`` to pre-load data, ``set_delay`` to
    simulate a slow feed and ``set_failing`` to make every call raise.
    Unknown identifiers return nothing. Every call is recorded in ``calls``.

    Args:
        name: Provider name to impersonate (``yahoo``, ``finnhub`` ...).
        quotes: Initial identifier -> quote or price mapping.
    """

    def __init__(
        self,
        name: str = "mock",
        quotes: dict[str, ProviderQuote | float] | None = None,
        *,
        delay: float = 0.0,
        fail: bool = False,
        enabled: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(timeout=timeout)
        self.name = name
        self._quotes: dict[str, ProviderQuote] = {}
        self._delay = delay
        self._fail = fail
        self._enabled = enabled
        self.calls: list[str] = []
        for symbol, value in (quotes or {}).items():
            self.set_quote(symbol, value)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # --- Pre-load helpers ---

    def set_quote(self, provider_symbol: str, quote: ProviderQuote | float) -> None:
        if not isinstance(quote, ProviderQuote):
            quote = ProviderQuote(
                provider=self.name, provider_symbol=provider_symbol, last=quote,
            )
        self._quotes[provider_symbol] = quote

    def set_price(
        self,
        provider_symbol: str,
        last: float,
        previous_close: float | None = None,
        bid: float | None = None,
        ask: float | None = None,
    ) -> None:
        self._quotes[provider_symbol] = ProviderQuote(
            provider=self.name,
            provider_symbol=provider_symbol,
            last=last,
            previous_close=previous_close,
            bid=bid,
            ask=ask,
        )

    def remove_quote(self, provider_symbol: str) -> None:
        self._quotes.pop(provider_symbol, None)

    def set_delay(self, seconds: float) -> None:
        self._delay = seconds

    def set_failing(self, fail: bool = True) -> None:
        self._fail = fail

    def set_enabled(self, enabled: bool = True) -> None:
        self._enabled = enabled

    # --- Provider implementation ---

    async def _fetch(self, provider_symbol: str) -> ProviderQuote | None:
        self.calls.append(provider_symbol)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise QuoteError(
                f"{self.name} mock failure for {provider_symbol}",
                code=QuoteErrorCode.PROVIDER_ERROR,
                retryable=True,
            )
        return self._quotes.get(provider_symbol)
