"""Custom exception hierarchy for fundscope."""

from typing import Any


class FundscopeError(Exception):
    """Base exception for all fundscope errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.

    Any FundscopeError that is not a NotFoundError is a "generic" failure
    from the caller's point of view.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(FundscopeError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str, the config field that failed validation
        value: Any, the invalid value
    """


class NotFoundError(FundscopeError):
    """No provider claims the requested fund ticker.

    Policy: surface to the client as a distinct "no such ticker" signal.

    Context keys:
        ticker: str, the requested ticker
        provider: str | None, the provider that rejected it, if any
    """


class FetchError(FundscopeError):
    """Network, HTTP, or parse failure while talking to an upstream source.

    Policy: propagate to the caller. Inside a details build, a failed
    per-holding price fetch is logged and degrades to "no series".

    Context keys:
        url: str, the URL that was being fetched
        ticker: str, the ticker involved
        status_code: int | None, HTTP status code if applicable
        provider: str, provider or price source name
    """


class ChartError(FundscopeError):
    """A chart could not be built from the available price history.

    Policy: raise immediately. A chart without an ETF baseline is meaningless.

    Context keys:
        ticker: str, the ETF ticker
        reason: str, "no_etf_prices", "no_overlap", "zero_base_price"
    """


def is_not_found(exc: BaseException) -> bool:
    """True if `exc` means "ticker unknown", False for every other failure."""
    return isinstance(exc, NotFoundError)
