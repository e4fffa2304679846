"""Tests for data quality validation."""

from dataclasses import replace

from marketquotes.models.quote import ProviderQuote
from marketquotes.quality import is_valid_price, validate_provider_quote, validate_quote


def _raw(**kwargs) -> ProviderQuote:
    defaults = dict(provider="yahoo", provider_symbol="AAPL", last=232.1)
    defaults.update(kwargs)
    return ProviderQuote(**defaults)


class TestIsValidPrice:
    def test_positive(self):
        assert is_valid_price(1.05)
        assert is_valid_price(98500)

    def test_rejects(self):
        assert not is_valid_price(0)
        assert not is_valid_price(-1.0)
        assert not is_valid_price(float("nan"))
        assert not is_valid_price(float("inf"))
        assert not is_valid_price(None)
        assert not is_valid_price("1.0")
        assert not is_valid_price(True)


class TestValidateProviderQuote:
    def test_valid(self, sample_provider_quote):
        assert validate_provider_quote(sample_provider_quote).passed

    def test_zero_price(self):
        result = validate_provider_quote(_raw(last=0.0))
        assert not result.passed
        assert result.failed_checks[0].name == "last_price"

    def test_nan_price(self):
        assert not validate_provider_quote(_raw(last=float("nan"))).passed

    def test_crossed_book(self):
        result = validate_provider_quote(_raw(bid=232.5, ask=232.0))
        assert not result.passed
        assert result.failed_checks[0].name == "bid_ask_order"
        assert "bid" in result.summary

    def test_inverted_range(self):
        result = validate_provider_quote(_raw(high=230.0, low=233.0))
        assert not result.passed
        assert result.failed_checks[0].name == "session_range"

    def test_missing_optional_fields_pass(self):
        assert validate_provider_quote(_raw()).passed


class TestValidateQuote:
    def test_valid(self, sample_quote):
        assert validate_quote(sample_quote)

    def test_zero_rejected(self, sample_quote):
        assert not validate_quote(replace(sample_quote, last=0.0))
