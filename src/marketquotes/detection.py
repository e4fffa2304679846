"""Detect instruments mentioned in a free-text chat message."""

from __future__ import annotations

import re
from dataclasses import dataclass

from marketquotes.models.symbol import InstrumentClass
from marketquotes.symbols import SymbolResolver, resolve_symbol

_PATTERNS: list[re.Pattern[str]] = [
    # FX pairs, with or without a slash
    re.compile(r"\b(?:EUR|GBP|AUD|NZD)/?USD\b", re.IGNORECASE),
    re.compile(r"\bUSD/?(?:JPY|CHF|CAD)\b", re.IGNORECASE),
    # Metals
    re.compile(r"\b(?:XAU/?USD|XAU|GOLD)\b", re.IGNORECASE),
    re.compile(r"\b(?:XAG/?USD|XAG|SILVER)\b", re.IGNORECASE),
    re.compile(r"\bGC(?:=F)?(?=\W|$)"),
    # Crypto
    re.compile(r"\b(?:BTC/?USD|BTC|BITCOIN)\b", re.IGNORECASE),
    re.compile(r"\b(?:ETH/?USD|ETH|ETHEREUM)\b", re.IGNORECASE),
    re.compile(r"\b(?:SOLUSD|SOLANA)\b", re.IGNORECASE),
    re.compile(r"\b(?:XRPUSD|XRP)\b", re.IGNORECASE),
    re.compile(r"\b(?:DOGEUSD|DOGE|DOGECOIN)\b", re.IGNORECASE),
    # Indices
    re.compile(r"\b(?:SPX|SP500|US500)\b|S&P\s*500", re.IGNORECASE),
    re.compile(r"\b(?:NDX|NASDAQ|NAS100)\b", re.IGNORECASE),
    re.compile(r"\b(?:DJI|US30)\b"),
    re.compile(r"\b(?:DAX|GER40)\b"),
    re.compile(r"\b(?:VIX|DXY)\b", re.IGNORECASE),
    # Energy
    re.compile(r"\b(?:WTI|USOIL|CRUDE|OIL)\b", re.IGNORECASE),
    re.compile(r"\bCL=F(?=\W|$)", re.IGNORECASE),
    re.compile(r"\b(?:BRENT|UKOIL)\b", re.IGNORECASE),
    # Equities
    re.compile(r"\b(?:AAPL|MSFT|GOOGL|AMZN|TSLA|META|NVDA)\b"),
]

_FUTURES_KEYWORDS = ("futures", "future", "contract", "gc=f", "cl=f", "si=f", "cme", "comex")
_SPOT_KEYWORDS = ("spot", "xau/usd", "xauusd", "forex", "fx")


def detect_instruments(message: str | None, resolver: SymbolResolver | None = None) -> list[str]:
    """Canonical symbols mentioned in ``message``, in order of appearance.

    >>> detect_instruments("Where is gold vs EUR/USD and bitcoin?")
    ['XAUUSD', 'EURUSD', 'BTCUSD']
    """
    if not message:
        return []

    resolve = resolver.resolve if resolver is not None else resolve_symbol
    hits: list[tuple[int, str]] = []
    for pattern in _PATTERNS:
        for match in pattern.finditer(message):
            hits.append((match.start(), match.group(0)))
    hits.sort(key=lambda hit: hit[0])

    symbols: list[str] = []
    for _, text in hits:
        mapping = resolve(text)
        if mapping.instrument_class is InstrumentClass.UNKNOWN:
            continue
        if mapping.symbol not in symbols:
            symbols.append(mapping.symbol)
    return symbols


@dataclass(frozen=True)
class InstrumentTypeHint:
    """Whether the user asked about the spot or the futures market."""

    is_futures: bool
    is_spot: bool
    explicit: bool


def detect_instrument_type(
    message: str | None,
    symbol: str | None = None,
    resolver: SymbolResolver | None = None,
) -> InstrumentTypeHint:
    """Decide whether ``message`` asks for spot or futures.

    Without an explicit keyword the symbol's own class decides, and spot is
    the default.
    """
    lower = (message or "").lower()
    has_futures = any(k in lower for k in _FUTURES_KEYWORDS)
    has_spot = any(k in lower for k in _SPOT_KEYWORDS)

    if not has_futures and not has_spot and symbol:
        resolve = resolver.resolve if resolver is not None else resolve_symbol
        if resolve(symbol).instrument_class is InstrumentClass.FUTURES:
            return InstrumentTypeHint(is_futures=True, is_spot=False, explicit=False)

    return InstrumentTypeHint(
        is_futures=has_futures and not has_spot,
        is_spot=has_spot or not has_futures,
        explicit=has_futures or has_spot,
    )
