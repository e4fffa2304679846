"""Tests for the MockProvider — contract tests for the provider interface."""

import pytest

from marketquotes.models.quote import ProviderQuote
from marketquotes.providers.mock import MockProvider


class TestMockProviderQuotes:
    @pytest.mark.asyncio
    async def test_preset_price(self, yahoo):
        yahoo.set_price("AAPL", 232.1, previous_close=230.0)
        raw = await yahoo.fetch("AAPL")
        assert isinstance(raw, ProviderQuote)
        assert raw.provider == "yahoo"
        assert raw.last == 232.1
        assert raw.previous_close == 230.0

    @pytest.mark.asyncio
    async def test_constructor_quotes(self):
        provider = MockProvider("finnhub", {"OANDA:EUR_USD": 1.0425})
        raw = await provider.fetch("OANDA:EUR_USD")
        assert raw.last == 1.0425
        assert raw.provider == "finnhub"

    @pytest.mark.asyncio
    async def test_unknown_returns_none(self, yahoo):
        assert await yahoo.fetch("NOPE") is None

    @pytest.mark.asyncio
    async def test_records_calls(self, yahoo):
        yahoo.set_price("AAPL", 232.1)
        await yahoo.fetch("AAPL")
        await yahoo.fetch("MSFT")
        assert yahoo.calls == ["AAPL", "MSFT"]

    @pytest.mark.asyncio
    async def test_remove_quote(self, yahoo):
        yahoo.set_price("AAPL", 232.1)
        yahoo.remove_quote("AAPL")
        assert await yahoo.fetch("AAPL") is None


class TestMockProviderFailures:
    @pytest.mark.asyncio
    async def test_failing_returns_none(self, yahoo):
        yahoo.set_price("AAPL", 232.1)
        yahoo.set_failing()
        assert await yahoo.fetch("AAPL") is None
        assert yahoo.calls == ["AAPL"]

    @pytest.mark.asyncio
    async def test_slow_times_out(self):
        provider = MockProvider("yahoo", {"AAPL": 232.1}, delay=1.0, timeout=0.05)
        assert await provider.fetch("AAPL") is None

    @pytest.mark.asyncio
    async def test_disabled_is_not_called(self, yahoo):
        yahoo.set_price("AAPL", 232.1)
        yahoo.set_enabled(False)
        assert await yahoo.fetch("AAPL") is None
        assert yahoo.calls == []

    @pytest.mark.asyncio
    async def test_invalid_price_rejected(self, yahoo):
        yahoo.set_price("AAPL", float("nan"))
        assert await yahoo.fetch("AAPL") is None
