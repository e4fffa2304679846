"""Data quality validation for provider output and normalized quotes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from marketquotes.models.quote import ProviderQuote, Quote


@dataclass
class ValidationCheck:
    """Single validation check result."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """Aggregate validation result."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]

    @property
    def summary(self) -> str:
        return "; ".join(c.message or c.name for c in self.failed_checks)


def is_valid_price(value: object) -> bool:
    """True for a finite number strictly above zero."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value) and not math.isinf(value) and value > 0


def validate_provider_quote(raw: ProviderQuote) -> ValidationResult:
    """Run sanity checks on one adapter result.

    Checks:
        1. Last price is a finite number > 0
        2. Bid <= ask when both are present
        3. High >= low when both are present
    """
    result = ValidationResult()

    # 1. Last price
    if is_valid_price(raw.last):
        result.checks.append(ValidationCheck("last_price", True))
    else:
        result.checks.append(
            ValidationCheck("last_price", False, f"unusable last price {raw.last!r}")
        )
        return result

    # 2. Bid/ask ordering
    if raw.bid is not None and raw.ask is not None and raw.bid > raw.ask:
        result.checks.append(
            ValidationCheck("bid_ask_order", False, f"bid {raw.bid} > ask {raw.ask}")
        )
    else:
        result.checks.append(ValidationCheck("bid_ask_order", True))

    # 3. Session range
    if raw.high is not None and raw.low is not None and raw.high < raw.low:
        result.checks.append(
            ValidationCheck("session_range", False, f"high {raw.high} < low {raw.low}")
        )
    else:
        result.checks.append(ValidationCheck("session_range", True))

    return result


def validate_quote(quote: Quote) -> bool:
    """Final gate before a quote is cached or returned: ``last`` must be usable."""
    return is_valid_price(quote.last)
