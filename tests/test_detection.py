"""Tests for instrument detection in chat messages."""

import pytest

from marketquotes.detection import detect_instrument_type, detect_instruments
from marketquotes.models.symbol import InstrumentClass, SymbolMapping
from marketquotes.symbols import SymbolResolver


class TestDetectInstruments:
    def test_empty(self):
        assert detect_instruments("") == []
        assert detect_instruments(None) == []

    def test_common_names(self):
        assert detect_instruments("Where is gold vs EUR/USD and bitcoin?") == [
            "XAUUSD", "EURUSD", "BTCUSD",
        ]

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("xauusd breakout?", ["XAUUSD"]),
            ("long GC=F into CPI", ["GC"]),
            ("S&P 500 and nasdaq", ["SPX", "NDX"]),
            ("crude oil inventories", ["WTI"]),
            ("silver or ethereum", ["XAGUSD", "ETHUSD"]),
            ("thoughts on NVDA earnings", ["NVDA"]),
            ("usd/jpy intervention", ["USDJPY"]),
        ],
    )
    def test_patterns(self, message, expected):
        assert detect_instruments(message) == expected

    def test_dedupes_aliases(self):
        assert detect_instruments("XAU/USD, XAUUSD, gold") == ["XAUUSD"]

    def test_no_instruments(self):
        assert detect_instruments("How do I manage risk on a losing streak?") == []


class TestDetectInstrumentType:
    def test_defaults_to_spot(self):
        hint = detect_instrument_type("where is gold?", "XAUUSD")
        assert hint.is_spot
        assert not hint.is_futures
        assert not hint.explicit

    def test_explicit_futures(self):
        hint = detect_instrument_type("gold futures on COMEX", "XAUUSD")
        assert hint.is_futures
        assert not hint.is_spot
        assert hint.explicit

    def test_explicit_spot(self):
        hint = detect_instrument_type("spot gold please", "XAUUSD")
        assert hint.is_spot
        assert hint.explicit

    def test_futures_symbol_without_keyword(self):
        hint = detect_instrument_type("what about GC", "GC")
        assert hint.is_futures
        assert not hint.explicit

    def test_uses_injected_resolver(self):
        table = {
            "MGC": SymbolMapping(
                symbol="MGC",
                instrument_class=InstrumentClass.FUTURES,
                yahoo="MGC=F",
                preferred_provider="yahoo",
            ),
        }
        resolver = SymbolResolver(table, validate=False)

        assert detect_instrument_type("what about MGC", "MGC", resolver).is_futures
        assert detect_instrument_type("what about MGC", "MGC").is_spot
