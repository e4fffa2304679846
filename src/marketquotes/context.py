"""Quote context — the JSON shape handed to a downstream AI prompt.

Every instrument is marked available or unavailable, and every available
one is marked stale or fresh. Consumers treat this as the only source of
prices; an unavailable instrument has no price to quote.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from marketquotes.models.quote import Quote
from marketquotes.models.result import QuoteResult, summarize

DEFAULT_LIVE_THRESHOLD_SECONDS = 15.0

VALIDATION_NOTE = (
    "Use ONLY prices from this context. Do NOT guess or make up prices. "
    "Instruments marked unavailable have no current price; say so instead of "
    "quoting one. Prices marked stale are delayed and must be labelled as such."
)


def quote_age_seconds(quote: Quote, now: datetime | None = None) -> float:
    """Seconds since the quote was fetched, or its recorded cache age if larger."""
    now = now or datetime.now(timezone.utc)
    age = max(0.0, (now - quote.fetched_at).total_seconds())
    if quote.age_seconds is not None:
        age = max(age, quote.age_seconds)
    return age


def instrument_entry(
    result: QuoteResult,
    live_threshold_seconds: float = DEFAULT_LIVE_THRESHOLD_SECONDS,
    now: datetime | None = None,
) -> dict[str, Any]:
    quote = result.quote
    if quote is None:
        return {
            "available": False,
            "status": result.status.value,
            "stale": None,
            "reason": result.reason or "Quote unavailable",
            "last_known": result.last_known,
        }

    age = quote_age_seconds(quote, now)
    return {
        "available": True,
        "status": result.status.value,
        "stale": quote.stale or age > live_threshold_seconds,
        "name": quote.name,
        "type": quote.instrument_class.value,
        "last": quote.last,
        "bid": quote.bid,
        "ask": quote.ask,
        "mid": quote.mid,
        "spread": quote.spread,
        "open": quote.open,
        "high": quote.high,
        "low": quote.low,
        "previous_close": quote.previous_close,
        "change": quote.change,
        "change_percent": quote.change_percent,
        "direction": quote.direction,
        "decimals": quote.decimals,
        "timestamp": quote.fetched_at.isoformat(),
        "age_seconds": round(age, 1),
        "source": quote.source,
        "futures_proxy": quote.futures_proxy,
    }


def build_quote_context(
    results: Mapping[str, QuoteResult],
    live_threshold_seconds: float = DEFAULT_LIVE_THRESHOLD_SECONDS,
) -> dict[str, Any]:
    """Build the prompt context for a batch of results.

    ``available`` at the top level is true when at least one instrument has
    a price.
    """
    now = datetime.now(timezone.utc)
    if not results:
        return {
            "available": False,
            "timestamp": now.isoformat(),
            "instruments": {},
            "message": "No live quotes available",
            "validation_note": VALIDATION_NOTE,
        }

    instruments = {
        symbol: instrument_entry(result, live_threshold_seconds, now)
        for symbol, result in results.items()
    }
    return {
        "available": any(entry["available"] for entry in instruments.values()),
        "timestamp": now.isoformat(),
        "instruments": instruments,
        "summary": summarize(dict(results)),
        "validation_note": VALIDATION_NOTE,
    }
