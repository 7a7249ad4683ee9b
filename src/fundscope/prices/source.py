"""Price source and adapter protocols: the source-agnostic interface layer.

Architecture
------------
Price history flows through two small seams:

    RawResponse → PriceAdapter → list[HistoricalPricePoint] → PriceSource → Cache

- **PriceSource** is the consumer-facing protocol. The aggregation cache
  depends only on this interface.

- **PriceAdapter** transforms a raw upstream payload into canonical
  ``HistoricalPricePoint`` records. It owns the timestamp normalization
  (local exchange time → UTC midnight), deduplication, and ordering, so
  everything downstream can assume a clean series.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from fundscope.core.models import HistoricalPricePoint


@runtime_checkable
class PriceAdapter(Protocol):
    """Transforms a raw upstream payload into a clean daily series.

    Returns
    -------
    list[HistoricalPricePoint]
        Sorted ascending by timestamp, one point per trading day, timestamps
        at UTC midnight.
    """

    def adapt(self, raw_data: Any, ticker: str) -> list[HistoricalPricePoint]: ...


@runtime_checkable
class PriceSource(Protocol):
    """Consumer-facing interface for fetching a daily price series."""

    @property
    def name(self) -> str: ...

    async def fetch_series(self, ticker: str) -> list[HistoricalPricePoint]:
        """Fetch the historical daily series for ``ticker``.

        Raises
        ------
        FetchError
            On any network, HTTP, or parse failure. Never returns partial data.
        """
        ...
