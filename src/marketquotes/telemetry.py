"""Health counters for the quote layer. Observational only."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass
class HealthCounters:
    """Running counters for one ``QuoteService``.

    Reset only by constructing a new instance.
    """

    total_requests: int = 0
    cache_hits: int = 0
    successful_fetches: int = 0
    stale_fallbacks: int = 0
    static_fallbacks: int = 0
    unavailable: int = 0
    errors: int = 0
    deadline_exceeded: int = 0
    latency_samples: int = 0
    avg_latency_ms: float = 0.0
    last_success_at: datetime | None = None

    def record_request(self) -> None:
        self.total_requests += 1

    def record_cache_hit(self) -> None:
        self.cache_hits += 1

    def record_success(self, latency_ms: float | None = None) -> None:
        self.successful_fetches += 1
        self.last_success_at = datetime.now(timezone.utc)
        if latency_ms is not None:
            self.record_latency(latency_ms)

    def record_stale(self) -> None:
        self.stale_fallbacks += 1

    def record_static(self) -> None:
        self.static_fallbacks += 1

    def record_unavailable(self) -> None:
        self.unavailable += 1

    def record_error(self) -> None:
        self.errors += 1

    def record_deadline(self) -> None:
        self.deadline_exceeded += 1

    def record_latency(self, latency_ms: float) -> None:
        self.latency_samples += 1
        self.avg_latency_ms += (latency_ms - self.avg_latency_ms) / self.latency_samples

    @property
    def cache_hit_rate(self) -> float:
        if not self.total_requests:
            return 0.0
        return self.cache_hits / self.total_requests

    def snapshot(self) -> dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_hit_rate": round(self.cache_hit_rate, 4),
            "successful_fetches": self.successful_fetches,
            "stale_fallbacks": self.stale_fallbacks,
            "static_fallbacks": self.static_fallbacks,
            "unavailable": self.unavailable,
            "errors": self.errors,
            "deadline_exceeded": self.deadline_exceeded,
            "avg_latency_ms": round(self.avg_latency_ms, 2),
            "last_success_at": (
                self.last_success_at.isoformat() if self.last_success_at else None
            ),
        }
