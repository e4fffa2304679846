"""Shared fixtures for marketquotes tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from marketquotes.cache import QuoteCache
from marketquotes.models.quote import ProviderQuote, Quote
from marketquotes.models.symbol import InstrumentClass
from marketquotes.providers.mock import MockProvider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> QuoteCache:
    return QuoteCache(fresh_ttl_seconds=3.0, clock=clock)


@pytest.fixture
def yahoo() -> MockProvider:
    return MockProvider("yahoo")


@pytest.fixture
def finnhub() -> MockProvider:
    return MockProvider("finnhub")


@pytest.fixture
def coingecko() -> MockProvider:
    return MockProvider("coingecko")


@pytest.fixture
def sample_provider_quote() -> ProviderQuote:
    return ProviderQuote(
        provider="finnhub",
        provider_symbol="OANDA:XAU_USD",
        last=2655.37,
        previous_close=2640.12,
        open=2641.0,
        high=2660.5,
        low=2635.2,
        bid=2655.1,
        ask=2655.6,
    )


@pytest.fixture
def sample_quote() -> Quote:
    return Quote(
        symbol="XAUUSD",
        name="Gold Spot",
        instrument_class=InstrumentClass.SPOT_FX,
        last=2655.37,
        bid=2655.1,
        ask=2655.6,
        mid=2655.35,
        previous_close=2640.12,
        change=15.25,
        change_percent=0.58,
        decimals=2,
        fetched_at=datetime(2024, 11, 20, 14, 30, tzinfo=timezone.utc),
        source="finnhub",
    )
