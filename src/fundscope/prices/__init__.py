"""Source-agnostic daily price history.

    Upstream JSON → PriceAdapter → list[HistoricalPricePoint] → PriceSource → Cache

- ``PriceSource``: Consumer-facing async interface (``fetch_series``).
- ``PriceAdapter``: Turns a raw payload into a clean UTC-midnight series.
- ``YahooPriceSource`` / ``YahooChartAdapter``: Yahoo Finance chart API.
"""

from fundscope.prices.source import PriceAdapter, PriceSource
from fundscope.prices.yahoo import YahooChartAdapter, YahooPriceSource

__all__ = [
    # Protocols
    "PriceAdapter",
    "PriceSource",
    # Yahoo Finance
    "YahooChartAdapter",
    "YahooPriceSource",
]
