"""Abstract base class for quote providers."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import httpx

from marketquotes.errors import QuoteError, QuoteErrorCode
from marketquotes.models.quote import ProviderQuote
from marketquotes.quality import validate_provider_quote

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


def _error_for_status(status_code: int, provider: str) -> QuoteError:
    if status_code in (401, 403):
        code = QuoteErrorCode.AUTH_FAILED
    elif status_code == 404:
        code = QuoteErrorCode.NOT_FOUND
    elif status_code == 429:
        code = QuoteErrorCode.RATE_LIMITED
    else:
        code = QuoteErrorCode.PROVIDER_ERROR
    return QuoteError(f"{provider} returned HTTP {status_code}", code=code, retryable=True)


class BaseQuoteProvider(ABC):
    """Abstract base for all quote providers.

    Subclasses implement ``_fetch``, which may raise. The public ``fetch``
    wraps it with the per-call timeout and a quality gate and turns every
    failure into ``None``: callers never see an adapter exception.

    Args:
        timeout: Per-call timeout in seconds.
        client: Shared ``httpx.AsyncClient``. When omitted a short-lived
            client is opened per request.
    """

    name: str = "base"

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout = timeout
        self.client = client

    @property
    def enabled(self) -> bool:
        """False when required configuration (e.g. an API key) is missing."""
        return True

    async def fetch(self, provider_symbol: str) -> ProviderQuote | None:
        """Fetch one quote, or ``None`` on any failure.

        The request runs under ``asyncio.wait_for``; on timeout the in-flight
        request is cancelled and its late result, if any, is discarded.
        """
        if not self.enabled or not provider_symbol:
            return None

        try:
            raw = await asyncio.wait_for(self._fetch(provider_symbol), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.debug("%s timed out after %.1fs for %s", self.name, self.timeout, provider_symbol)
            return None
        except QuoteError as exc:
            logger.info("%s failed for %s [%s]: %s", self.name, provider_symbol, exc.code.value, exc)
            return None
        except httpx.HTTPError as exc:
            logger.info("%s transport error for %s: %s", self.name, provider_symbol, exc)
            return None
        except (TypeError, ValueError, KeyError, AttributeError, OverflowError, OSError) as exc:
            logger.info("%s sent an unparseable payload for %s: %r", self.name, provider_symbol, exc)
            return None

        if raw is None:
            return None

        check = validate_provider_quote(raw)
        if not check.passed:
            logger.info("%s rejected quote for %s: %s", self.name, provider_symbol, check.summary)
            return None
        return raw

    @abstractmethod
    async def _fetch(self, provider_symbol: str) -> ProviderQuote | None:
        """Fetch and parse one quote. May raise ``QuoteError``/``httpx.HTTPError``."""
        ...

    # --- HTTP helpers ---

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` and decode JSON, raising ``QuoteError`` on failure."""
        try:
            if self.client is not None:
                response = await self.client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise QuoteError(
                f"{self.name} request timed out",
                code=QuoteErrorCode.TIMEOUT,
                retryable=True,
            ) from exc

        if not response.is_success:
            raise _error_for_status(response.status_code, self.name)

        try:
            return response.json()
        except ValueError as exc:
            raise QuoteError(
                f"{self.name} returned a non-JSON body",
                code=QuoteErrorCode.MALFORMED_PAYLOAD,
                retryable=True,
            ) from exc

    @staticmethod
    def _number(value: Any) -> float | None:
        """Coerce a payload value to float; ``None`` for missing/garbage/zero."""
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if number != 0 else None

    @staticmethod
    def _timestamp(value: Any) -> datetime | None:
        """Epoch seconds to an aware UTC datetime; ``None`` when absent or out of range."""
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self.timeout}, enabled={self.enabled})"
