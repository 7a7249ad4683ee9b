"""Fund providers: catalog discovery and holdings download.

- ``Provider``: Protocol every fund family implements.
- ``ProviderRegistry``: Merges catalogs and routes ticker requests.
- ``ISharesProvider``: iShares listing page + holdings CSV.
- ``fully_qualified_ticker``: Yahoo exchange-suffix qualification.
"""

from fundscope.providers.base import Provider
from fundscope.providers.ishares import ISharesProvider, parse_formatted_float
from fundscope.providers.registry import ProviderRegistry
from fundscope.providers.tickers import (
    RAW_TICKER_FALLBACK,
    exchange_suffix,
    fully_qualified_ticker,
)

__all__ = [
    "Provider",
    "ProviderRegistry",
    "ISharesProvider",
    "parse_formatted_float",
    "RAW_TICKER_FALLBACK",
    "exchange_suffix",
    "fully_qualified_ticker",
]
