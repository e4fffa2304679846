"""Symbol resolver — canonical and alias symbols to provider identifiers.

XAUUSD is spot gold and GC is the CME future. They are different instruments
and never share a mapping; where a provider only carries the future (Yahoo's
``GC=F``), the mapping lists it in ``futures_proxies`` so quotes from it are
flagged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from marketquotes.errors import SymbolTableError
from marketquotes.models.symbol import InstrumentClass, SymbolMapping
from marketquotes.orchestrator import provider_order

logger = logging.getLogger(__name__)

MAX_ALIAS_HOPS = 5


def _preferred(mapping: SymbolMapping) -> str | None:
    for provider in provider_order(mapping.instrument_class):
        if mapping.provider_id(provider):
            return provider
    return None


def _entry(
    symbol: str,
    name: str,
    instrument_class: InstrumentClass,
    decimals: int,
    *,
    yahoo: str | None = None,
    finnhub: str | None = None,
    coingecko: str | None = None,
    futures_proxies: tuple[str, ...] = (),
) -> SymbolMapping:
    mapping = SymbolMapping(
        symbol=symbol,
        name=name,
        instrument_class=instrument_class,
        decimals=decimals,
        yahoo=yahoo,
        finnhub=finnhub,
        coingecko=coingecko,
        futures_proxies=frozenset(futures_proxies),
    )
    return replace(mapping, preferred_provider=_preferred(mapping))


def _build_table(
    entries: list[SymbolMapping], aliases: dict[str, str],
) -> dict[str, SymbolMapping]:
    table = {m.symbol: m for m in entries}
    for alias, target in aliases.items():
        table[alias] = SymbolMapping(symbol=alias, alias=target)
    return table


_SPOT = InstrumentClass.SPOT_FX
_FUT = InstrumentClass.FUTURES
_IDX = InstrumentClass.INDEX
_CRYPTO = InstrumentClass.CRYPTO
_EQ = InstrumentClass.EQUITY

SYMBOL_TABLE: dict[str, SymbolMapping] = _build_table(
    [
        # ---- spot metals (Yahoo only carries the future)
        _entry("XAUUSD", "Gold Spot", _SPOT, 2,
               yahoo="GC=F", finnhub="OANDA:XAU_USD", futures_proxies=("yahoo",)),
        _entry("XAGUSD", "Silver Spot", _SPOT, 3,
               yahoo="SI=F", finnhub="OANDA:XAG_USD", futures_proxies=("yahoo",)),
        # ---- spot FX
        _entry("EURUSD", "EUR/USD", _SPOT, 5, yahoo="EURUSD=X", finnhub="OANDA:EUR_USD"),
        _entry("GBPUSD", "GBP/USD", _SPOT, 5, yahoo="GBPUSD=X", finnhub="OANDA:GBP_USD"),
        _entry("USDJPY", "USD/JPY", _SPOT, 3, yahoo="USDJPY=X", finnhub="OANDA:USD_JPY"),
        _entry("USDCHF", "USD/CHF", _SPOT, 5, yahoo="USDCHF=X", finnhub="OANDA:USD_CHF"),
        _entry("AUDUSD", "AUD/USD", _SPOT, 5, yahoo="AUDUSD=X", finnhub="OANDA:AUD_USD"),
        _entry("USDCAD", "USD/CAD", _SPOT, 5, yahoo="USDCAD=X", finnhub="OANDA:USD_CAD"),
        _entry("NZDUSD", "NZD/USD", _SPOT, 5, yahoo="NZDUSD=X", finnhub="OANDA:NZD_USD"),
        # ---- futures
        _entry("GC", "Gold Futures (CME)", _FUT, 2, yahoo="GC=F"),
        _entry("WTI", "WTI Crude Oil", _FUT, 2, yahoo="CL=F"),
        _entry("BRENT", "Brent Crude Oil", _FUT, 2, yahoo="BZ=F"),
        # ---- crypto
        _entry("BTCUSD", "Bitcoin", _CRYPTO, 2,
               yahoo="BTC-USD", finnhub="BINANCE:BTCUSDT", coingecko="bitcoin"),
        _entry("ETHUSD", "Ethereum", _CRYPTO, 2,
               yahoo="ETH-USD", finnhub="BINANCE:ETHUSDT", coingecko="ethereum"),
        _entry("SOLUSD", "Solana", _CRYPTO, 2,
               yahoo="SOL-USD", finnhub="BINANCE:SOLUSDT", coingecko="solana"),
        _entry("XRPUSD", "XRP", _CRYPTO, 4,
               yahoo="XRP-USD", finnhub="BINANCE:XRPUSDT", coingecko="ripple"),
        _entry("BNBUSD", "BNB", _CRYPTO, 2,
               yahoo="BNB-USD", finnhub="BINANCE:BNBUSDT", coingecko="binancecoin"),
        _entry("ADAUSD", "Cardano", _CRYPTO, 4,
               yahoo="ADA-USD", finnhub="BINANCE:ADAUSDT", coingecko="cardano"),
        _entry("DOGEUSD", "Dogecoin", _CRYPTO, 5,
               yahoo="DOGE-USD", finnhub="BINANCE:DOGEUSDT", coingecko="dogecoin"),
        # ---- indices and rates
        _entry("SPX", "S&P 500", _IDX, 2, yahoo="^GSPC"),
        _entry("NDX", "NASDAQ Composite", _IDX, 2, yahoo="^IXIC"),
        _entry("DJI", "Dow Jones Industrial Average", _IDX, 2, yahoo="^DJI"),
        _entry("DAX", "DAX 40", _IDX, 2, yahoo="^GDAXI"),
        _entry("FTSE", "FTSE 100", _IDX, 2, yahoo="^FTSE"),
        _entry("NIKKEI", "Nikkei 225", _IDX, 2, yahoo="^N225"),
        _entry("VIX", "CBOE Volatility Index", _IDX, 2, yahoo="^VIX"),
        _entry("DXY", "US Dollar Index", _IDX, 3, yahoo="DX-Y.NYB"),
        _entry("US10Y", "US 10Y Treasury Yield", _IDX, 3, yahoo="^TNX"),
        # ---- equities
        _entry("AAPL", "Apple", _EQ, 2, yahoo="AAPL", finnhub="AAPL"),
        _entry("MSFT", "Microsoft", _EQ, 2, yahoo="MSFT", finnhub="MSFT"),
        _entry("NVDA", "NVIDIA", _EQ, 2, yahoo="NVDA", finnhub="NVDA"),
        _entry("AMZN", "Amazon", _EQ, 2, yahoo="AMZN", finnhub="AMZN"),
        _entry("GOOGL", "Alphabet", _EQ, 2, yahoo="GOOGL", finnhub="GOOGL"),
        _entry("META", "Meta Platforms", _EQ, 2, yahoo="META", finnhub="META"),
        _entry("TSLA", "Tesla", _EQ, 2, yahoo="TSLA", finnhub="TSLA"),
    ],
    {
        "GOLD": "XAUUSD", "XAU": "XAUUSD", "XAU/USD": "XAUUSD",
        "SILVER": "XAGUSD", "XAG": "XAGUSD", "XAG/USD": "XAGUSD",
        "EUR/USD": "EURUSD", "GBP/USD": "GBPUSD", "USD/JPY": "USDJPY",
        "USD/CHF": "USDCHF", "AUD/USD": "AUDUSD", "USD/CAD": "USDCAD",
        "NZD/USD": "NZDUSD",
        "GC=F": "GC",
        "USOIL": "WTI", "CRUDE": "WTI", "OIL": "WTI", "CL=F": "WTI",
        "UKOIL": "BRENT", "BZ=F": "BRENT",
        "BTC": "BTCUSD", "BITCOIN": "BTCUSD", "BTC/USD": "BTCUSD",
        "ETH": "ETHUSD", "ETHEREUM": "ETHUSD", "ETH/USD": "ETHUSD",
        "SOL": "SOLUSD", "SOLANA": "SOLUSD",
        "XRP": "XRPUSD",
        "BNB": "BNBUSD",
        "ADA": "ADAUSD", "CARDANO": "ADAUSD",
        "DOGE": "DOGEUSD", "DOGECOIN": "DOGEUSD",
        "SP500": "SPX", "S&P500": "SPX", "US500": "SPX",
        "NASDAQ": "NDX", "NAS100": "NDX",
        "DOW": "DJI", "US30": "DJI",
        "GER40": "DAX", "UK100": "FTSE", "JP225": "NIKKEI",
    },
)


def normalize_symbol(raw: str | None) -> str:
    """Uppercase and remove all whitespace."""
    if not raw:
        return ""
    return "".join(str(raw).split()).upper()


def validate_symbol_table(
    table: Mapping[str, SymbolMapping], max_hops: int = MAX_ALIAS_HOPS,
) -> None:
    """Reject tables with unterminated alias chains or inconsistent entries.

    Raises:
        SymbolTableError: On the first problem found.
    """
    for key, mapping in table.items():
        if key != mapping.symbol:
            raise SymbolTableError(f"Key '{key}' does not match symbol '{mapping.symbol}'")

        current = mapping
        hops = 0
        while current.is_alias:
            if hops >= max_hops:
                raise SymbolTableError(
                    f"Alias chain from '{key}' does not resolve within {max_hops} hops"
                )
            target = table.get(current.alias or "")
            if target is None:
                raise SymbolTableError(
                    f"Alias '{current.symbol}' points at unknown symbol '{current.alias}'"
                )
            current = target
            hops += 1

        if not mapping.is_alias and mapping.preferred_provider is not None:
            expected = _preferred(mapping)
            if mapping.preferred_provider != expected:
                raise SymbolTableError(
                    f"'{key}' prefers '{mapping.preferred_provider}' but its "
                    f"{mapping.instrument_class.value} order starts with '{expected}'"
                )


class SymbolResolver:
    """Resolve user input to a ``SymbolMapping``.

    Unknown symbols are not an error: they get a best-effort mapping that
    queries Yahoo with the plain ticker.
    """

    def __init__(
        self,
        table: Mapping[str, SymbolMapping] | None = None,
        max_hops: int = MAX_ALIAS_HOPS,
        validate: bool = True,
    ) -> None:
        self.table: Mapping[str, SymbolMapping] = SYMBOL_TABLE if table is None else table
        self.max_hops = max_hops
        if validate:
            validate_symbol_table(self.table, max_hops)

    def resolve(self, raw: str | None) -> SymbolMapping:
        symbol = normalize_symbol(raw)
        if not symbol:
            return SymbolMapping(symbol="", name="", preferred_provider=None)

        mapping = self.table.get(symbol)
        hops = 0
        while mapping is not None and mapping.is_alias:
            if hops >= self.max_hops:
                logger.error(
                    "Alias chain for %s did not resolve within %d hops", symbol, self.max_hops,
                )
                return self.synthesize(symbol)
            mapping = self.table.get(mapping.alias or "")
            hops += 1

        if mapping is None:
            return self.synthesize(symbol)
        return mapping

    def canonical(self, raw: str | None) -> str:
        return self.resolve(raw).symbol

    def is_known(self, raw: str | None) -> bool:
        return self.resolve(raw).instrument_class is not InstrumentClass.UNKNOWN

    @staticmethod
    def synthesize(symbol: str) -> SymbolMapping:
        """Best-effort mapping for a symbol missing from the table."""
        return SymbolMapping(
            symbol=symbol,
            name=symbol,
            instrument_class=InstrumentClass.UNKNOWN,
            decimals=2,
            yahoo=symbol,
            preferred_provider="yahoo",
        )


_default_resolver: SymbolResolver | None = None


def resolve_symbol(raw: str | None) -> SymbolMapping:
    """Resolve against the built-in table."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = SymbolResolver()
    return _default_resolver.resolve(raw)
