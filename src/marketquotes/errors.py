"""Quote layer error types."""

from __future__ import annotations

from enum import Enum


class QuoteErrorCode(Enum):
    """Error classification codes."""

    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    MALFORMED_PAYLOAD = "malformed_payload"
    VALIDATION_FAILED = "validation_failed"
    NO_DATA = "no_data"
    TOO_MANY_SYMBOLS = "too_many_symbols"


class QuoteError(Exception):
    """Quote layer exception with error code and retryable flag.

    Provider adapters raise this internally and convert it to ``None`` at
    their public boundary. The only code that escapes the public API is
    ``TOO_MANY_SYMBOLS``, which callers should map to a client error.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether the next provider in the order is worth trying.
    """

    def __init__(
        self,
        message: str,
        code: QuoteErrorCode = QuoteErrorCode.PROVIDER_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable

    @property
    def is_client_error(self) -> bool:
        return self.code is QuoteErrorCode.TOO_MANY_SYMBOLS


class SymbolTableError(ValueError):
    """Raised when a symbol mapping table is internally inconsistent."""
