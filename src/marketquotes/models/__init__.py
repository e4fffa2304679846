"""Quote layer models."""

from marketquotes.models.quote import ProviderQuote, Quote, format_price
from marketquotes.models.result import QuoteResult, QuoteStatus, summarize
from marketquotes.models.symbol import InstrumentClass, SymbolMapping

__all__ = [
    "InstrumentClass",
    "SymbolMapping",
    "ProviderQuote",
    "Quote",
    "QuoteResult",
    "QuoteStatus",
    "format_price",
    "summarize",
]
