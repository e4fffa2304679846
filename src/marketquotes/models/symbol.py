"""Instrument class and symbol mapping models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InstrumentClass(str, Enum):
    """Price convention an instrument trades under."""

    SPOT_FX = "spot_fx"
    FUTURES = "futures"
    INDEX = "index"
    CRYPTO = "crypto"
    EQUITY = "equity"
    UNKNOWN = "unknown"

    @property
    def is_spot(self) -> bool:
        return self in (InstrumentClass.SPOT_FX, InstrumentClass.CRYPTO)


@dataclass(frozen=True)
class SymbolMapping:
    """Static mapping from a canonical symbol to provider identifiers.

    An entry with ``alias`` set is a redirect and carries no other data.

    Attributes:
        symbol: Canonical application symbol (e.g. ``XAUUSD``).
        name: Display name.
        instrument_class: Price convention of the instrument.
        decimals: Display precision.
        yahoo: Yahoo chart identifier (``GC=F``, ``^GSPC``, ``AAPL``).
        finnhub: Finnhub quote identifier (``OANDA:XAU_USD``).
        coingecko: CoinGecko coin id (``bitcoin``).
        preferred_provider: First provider in the class order that has an
            identifier for this symbol. Informational only.
        futures_proxies: Providers whose identifier is a futures contract
            standing in for a spot instrument.
        alias: Canonical symbol this entry redirects to.
    """

    symbol: str
    name: str = ""
    instrument_class: InstrumentClass = InstrumentClass.UNKNOWN
    decimals: int = 2
    yahoo: str | None = None
    finnhub: str | None = None
    coingecko: str | None = None
    preferred_provider: str | None = None
    futures_proxies: frozenset[str] = frozenset()
    alias: str | None = None

    @property
    def is_alias(self) -> bool:
        return self.alias is not None

    @property
    def display_name(self) -> str:
        return self.name or self.symbol

    def provider_id(self, provider: str) -> str | None:
        """Return this symbol's identifier for ``provider``, if any."""
        if provider not in ("yahoo", "finnhub", "coingecko"):
            return None
        return getattr(self, provider)

    def is_futures_proxy(self, provider: str) -> bool:
        return provider in self.futures_proxies
