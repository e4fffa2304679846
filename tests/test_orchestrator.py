"""Tests for the fallback orchestrator — class order, short-circuit, proxies."""

import pytest

from marketquotes.models.quote import ProviderQuote
from marketquotes.models.symbol import InstrumentClass
from marketquotes.orchestrator import (
    PROVIDER_PREFERENCE,
    FallbackOrchestrator,
    build_quote,
    provider_order,
)
from marketquotes.providers.mock import MockProvider
from marketquotes.symbols import resolve_symbol


def _orchestrator(*providers: MockProvider) -> FallbackOrchestrator:
    return FallbackOrchestrator({p.name: p for p in providers})


class TestPreferenceTable:
    def test_every_class_has_an_order(self):
        for instrument_class in InstrumentClass:
            assert provider_order(instrument_class)

    def test_declared_orders(self):
        assert PROVIDER_PREFERENCE[InstrumentClass.CRYPTO] == ("coingecko", "finnhub", "yahoo")
        assert PROVIDER_PREFERENCE[InstrumentClass.SPOT_FX] == ("finnhub", "yahoo")
        assert PROVIDER_PREFERENCE[InstrumentClass.FUTURES] == ("yahoo",)
        assert PROVIDER_PREFERENCE[InstrumentClass.EQUITY] == ("yahoo", "finnhub")

    def test_order_skips_missing_and_disabled(self, yahoo, finnhub):
        finnhub.set_enabled(False)
        orch = _orchestrator(yahoo, finnhub)
        assert orch.order_for(resolve_symbol("XAUUSD")) == ["yahoo"]

    def test_order_skips_providers_without_identifier(self, yahoo, finnhub, coingecko):
        orch = _orchestrator(yahoo, finnhub, coingecko)
        assert orch.order_for(resolve_symbol("SPX")) == ["yahoo"]
        assert orch.order_for(resolve_symbol("BTCUSD")) == ["coingecko", "finnhub", "yahoo"]


class TestBuildQuote:
    def test_change_against_provider_previous_close(self, sample_provider_quote):
        quote = build_quote(sample_provider_quote, resolve_symbol("XAUUSD"))
        assert quote.symbol == "XAUUSD"
        assert quote.name == "Gold Spot"
        assert quote.last == 2655.37
        assert quote.change == 15.25
        assert quote.change_percent == 0.58
        assert quote.mid == 2655.35
        assert quote.source == "finnhub"
        assert not quote.futures_proxy
        assert not quote.stale

    def test_no_previous_close_means_flat(self):
        raw = ProviderQuote(provider="yahoo", provider_symbol="AAPL", last=232.1)
        quote = build_quote(raw, resolve_symbol("AAPL"))
        assert quote.change == 0.0
        assert quote.change_percent == 0.0
        assert quote.mid == 232.1

    def test_rounds_to_mapping_decimals(self):
        raw = ProviderQuote(provider="finnhub", provider_symbol="OANDA:EUR_USD", last=1.0425678)
        assert build_quote(raw, resolve_symbol("EURUSD")).last == 1.04257


class TestFetchQuote:
    @pytest.mark.asyncio
    async def test_spot_fx_uses_broker_spot_first(self, yahoo, finnhub):
        finnhub.set_price("OANDA:XAU_USD", 2655.3, previous_close=2640.1)
        yahoo.set_price("GC=F", 2670.0)
        quote = await _orchestrator(yahoo, finnhub).fetch_quote(resolve_symbol("XAUUSD"))
        assert quote.source == "finnhub"
        assert quote.last == 2655.3
        assert not quote.futures_proxy
        assert yahoo.calls == []

    @pytest.mark.asyncio
    async def test_falls_back_to_futures_proxy_and_flags_it(self, yahoo, finnhub):
        finnhub.set_failing()
        yahoo.set_price("GC=F", 2670.0)
        quote = await _orchestrator(yahoo, finnhub).fetch_quote(resolve_symbol("XAUUSD"))
        assert quote.source == "yahoo"
        assert quote.symbol == "XAUUSD"
        assert quote.futures_proxy
        assert finnhub.calls == ["OANDA:XAU_USD"]

    @pytest.mark.asyncio
    async def test_futures_symbol_is_not_a_proxy(self, yahoo):
        yahoo.set_price("GC=F", 2670.0)
        quote = await _orchestrator(yahoo).fetch_quote(resolve_symbol("GC"))
        assert quote.symbol == "GC"
        assert not quote.futures_proxy

    @pytest.mark.asyncio
    async def test_crypto_prefers_aggregator(self, yahoo, finnhub, coingecko):
        coingecko.set_price("bitcoin", 98000.0)
        finnhub.set_price("BINANCE:BTCUSDT", 98100.0)
        yahoo.set_price("BTC-USD", 98200.0)
        quote = await _orchestrator(yahoo, finnhub, coingecko).fetch_quote(resolve_symbol("BTC"))
        assert quote.source == "coingecko"
        assert finnhub.calls == []
        assert yahoo.calls == []

    @pytest.mark.asyncio
    async def test_sequential_short_circuit(self, yahoo, finnhub, coingecko):
        coingecko.set_price("bitcoin", float("nan"))
        finnhub.set_price("BINANCE:BTCUSDT", 98100.0)
        yahoo.set_price("BTC-USD", 98200.0)
        quote = await _orchestrator(yahoo, finnhub, coingecko).fetch_quote(resolve_symbol("BTCUSD"))
        assert quote.source == "finnhub"
        assert coingecko.calls == ["bitcoin"]
        assert yahoo.calls == []

    @pytest.mark.asyncio
    async def test_exhausted_returns_none(self, yahoo, finnhub):
        finnhub.set_failing()
        yahoo.set_failing()
        assert await _orchestrator(yahoo, finnhub).fetch_quote(resolve_symbol("EURUSD")) is None

    @pytest.mark.asyncio
    async def test_unknown_symbol_queries_yahoo_plain_ticker(self, yahoo):
        yahoo.set_price("PLTR", 71.5)
        quote = await _orchestrator(yahoo).fetch_quote(resolve_symbol("pltr"))
        assert quote.symbol == "PLTR"
        assert quote.instrument_class is InstrumentClass.UNKNOWN
        assert yahoo.calls == ["PLTR"]

    @pytest.mark.asyncio
    async def test_empty_mapping_returns_none(self, yahoo):
        assert await _orchestrator(yahoo).fetch_quote(resolve_symbol("")) is None
        assert yahoo.calls == []

    @pytest.mark.asyncio
    async def test_parse_failure_moves_to_next_provider(self, yahoo):
        class GarbledFinnhub(MockProvider):
            async def _fetch(self, provider_symbol):
                self.calls.append(provider_symbol)
                return ["oops"][0].get("meta")

        garbled = GarbledFinnhub("finnhub")
        yahoo.set_price("GC=F", 2670.0)

        quote = await _orchestrator(yahoo, garbled).fetch_quote(resolve_symbol("XAUUSD"))

        assert garbled.calls == ["OANDA:XAU_USD"]
        assert quote.source == "yahoo"
        assert quote.last == 2670.0
        assert quote.futures_proxy
