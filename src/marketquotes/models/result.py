"""Per-symbol result returned to quote layer callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from marketquotes.models.quote import Quote


class QuoteStatus(str, Enum):
    """Terminal state of one symbol's fetch pipeline."""

    LIVE = "live"
    CACHED = "cached"
    STALE = "stale"
    STATIC = "static"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class QuoteResult:
    """Either a usable quote or an explicit unavailable marker.

    Attributes:
        symbol: Canonical symbol the caller asked for.
        status: How the result was produced.
        quote: The quote, present iff ``available``.
        reason: Human-readable reason when unavailable.
        last_known: Last known price, if one exists, when unavailable.
        latency_ms: Wall time spent producing this result.
    """

    symbol: str
    status: QuoteStatus
    quote: Quote | None = None
    reason: str | None = None
    last_known: float | None = None
    latency_ms: float | None = None

    @classmethod
    def of(
        cls, quote: Quote, status: QuoteStatus, latency_ms: float | None = None,
    ) -> QuoteResult:
        return cls(symbol=quote.symbol, status=status, quote=quote, latency_ms=latency_ms)

    @classmethod
    def unavailable(
        cls,
        symbol: str,
        reason: str,
        *,
        last_known: float | None = None,
        latency_ms: float | None = None,
    ) -> QuoteResult:
        return cls(
            symbol=symbol,
            status=QuoteStatus.UNAVAILABLE,
            reason=reason or "Quote unavailable",
            last_known=last_known,
            latency_ms=latency_ms,
        )

    @property
    def available(self) -> bool:
        return self.quote is not None

    @property
    def last(self) -> float | None:
        return self.quote.last if self.quote is not None else None

    @property
    def stale(self) -> bool:
        return self.quote.stale if self.quote is not None else False

    @property
    def source(self) -> str | None:
        return self.quote.source if self.quote is not None else None

    def to_dict(self) -> dict[str, Any]:
        if self.quote is None:
            return {
                "available": False,
                "symbol": self.symbol,
                "status": self.status.value,
                "reason": self.reason,
                "last": None,
                "last_known": self.last_known,
            }
        data: dict[str, Any] = {"available": True, "status": self.status.value}
        data.update(self.quote.to_dict())
        if self.latency_ms is not None:
            data["latency_ms"] = round(self.latency_ms, 2)
        return data


def summarize(results: dict[str, QuoteResult]) -> dict[str, Any]:
    """Count live vs delayed results and list the unavailable symbols."""
    live = 0
    delayed = 0
    unavailable: list[str] = []
    for symbol, result in results.items():
        if not result.available:
            unavailable.append(symbol)
        elif result.stale:
            delayed += 1
        else:
            live += 1
    return {
        "total": len(results),
        "live": live,
        "delayed": delayed,
        "unavailable": unavailable,
    }
