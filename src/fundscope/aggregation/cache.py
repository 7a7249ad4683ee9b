"""Cache-aside aggregation of fund details and price series.

Two independent in-memory maps, each guarded by its own lock:

    details: fund ticker    -> DetailsAggregate
    prices:  any ticker     -> list[HistoricalPricePoint]

Entries are only ever added, never replaced or evicted, so a cached value is
served verbatim until the process exits. Network work always happens outside
the locks. Errors are never cached; the next call retries.

With ``single_flight`` enabled, concurrent misses on the same key share one
fetch. With it disabled, each miss fetches on its own and the last write wins.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from fundscope.core.config import CacheConfig
from fundscope.core.exceptions import FetchError, FundscopeError
from fundscope.core.models import (
    DetailsAggregate,
    EquityHolding,
    Fund,
    HistoricalPricePoint,
)
from fundscope.prices.source import PriceSource
from fundscope.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for both cache maps."""

    details_entries: int
    prices_entries: int
    hits: int
    misses: int
    coalesced: int


class _CacheMap(Generic[V]):
    """One cache-aside map with its lock and in-flight fetch table."""

    def __init__(self, label: str, single_flight: bool) -> None:
        self._label = label
        self._single_flight = single_flight
        self._entries: dict[str, V] = {}
        self._inflight: dict[str, asyncio.Task[V]] = {}
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0
        self.coalesced = 0

    def __len__(self) -> int:
        return len(self._entries)

    async def peek(self, key: str) -> V | None:
        async with self._lock:
            return self._entries.get(key)

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[V]]) -> V:
        async with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                logger.debug("Cached %s for %s", self._label, key)
                return cached

            task = self._inflight.get(key) if self._single_flight else None
            if task is not None:
                self.coalesced += 1
                logger.debug("Joining in-flight %s fetch for %s", self._label, key)
            else:
                self.misses += 1
                logger.debug("%s for %s not cached", self._label.capitalize(), key)
                if self._single_flight:
                    task = asyncio.ensure_future(self._fetch_and_store(key, fetch))
                    self._inflight[key] = task

        if task is None:
            return await self._fetch_and_store(key, fetch)
        # One waiter being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, fetch: Callable[[], Awaitable[V]]) -> V:
        try:
            value = await fetch()
            async with self._lock:
                self._entries[key] = value
            return value
        finally:
            self._inflight.pop(key, None)


class AggregationCache:
    """Builds and caches per-fund details from providers and a price source.

    Parameters
    ----------
    registry : ProviderRegistry
        Routes fund tickers to their provider.
    price_source : PriceSource
        Supplies daily price series for funds and holdings.
    config : CacheConfig | None
        Single-flight and fan-out settings. Defaults if None.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        price_source: PriceSource,
        config: CacheConfig | None = None,
    ) -> None:
        self._registry = registry
        self._price_source = price_source
        self._config = config or CacheConfig()
        self._details: _CacheMap[DetailsAggregate] = _CacheMap(
            "details", self._config.single_flight
        )
        self._prices: _CacheMap[list[HistoricalPricePoint]] = _CacheMap(
            "prices", self._config.single_flight
        )
        self._fetch_slots = asyncio.Semaphore(self._config.max_concurrent_fetches)

    # --- Prices ---

    async def prices(self, ticker: str) -> list[HistoricalPricePoint]:
        """Return the price series for ``ticker``, fetching it on a miss.

        Raises:
            FetchError: If the price source fails. Nothing is cached.
        """
        return await self._prices.get_or_fetch(ticker, lambda: self._fetch_prices(ticker))

    async def _fetch_prices(self, ticker: str) -> list[HistoricalPricePoint]:
        async with self._fetch_slots:
            try:
                return await self._price_source.fetch_series(ticker)
            except FundscopeError:
                raise
            except Exception as e:
                raise FetchError(
                    f"Error {self._price_source.name}.fetch_series({ticker}): {e}",
                    context={"ticker": ticker, "provider": self._price_source.name},
                ) from e

    async def _prices_or_none(self, ticker: str) -> list[HistoricalPricePoint] | None:
        try:
            return await self.prices(ticker)
        except FundscopeError as e:
            logger.warning("No price history for %s: %s", ticker, e)
            return None

    async def _gather_prices(
        self, tickers: list[str]
    ) -> list[list[HistoricalPricePoint] | None]:
        if self._config.concurrent_fanout:
            return list(await asyncio.gather(*(self._prices_or_none(t) for t in tickers)))
        return [await self._prices_or_none(t) for t in tickers]

    # --- Details ---

    async def details(self, ticker: str) -> DetailsAggregate:
        """Return the details for fund ``ticker``, building them on a miss.

        A missing price series for a holding (or the fund itself) does not
        fail the call; that series is simply None.

        Raises:
            NotFoundError: No provider serves ``ticker``.
            FetchError: The provider failed to fetch the fund.
        """
        return await self._details.get_or_fetch(ticker, lambda: self._build_details(ticker))

    async def cached_details(self, ticker: str) -> DetailsAggregate | None:
        """Return cached details without fetching anything."""
        return await self._details.peek(ticker)

    async def _build_details(self, ticker: str) -> DetailsAggregate:
        fund = await self._registry.fetch_details(ticker)
        logger.info("Building details for %s (%d holdings)", ticker, len(fund.holdings))

        equities = [h for h in fund.holdings if h.is_equity]
        # Fund's own series goes last
        series = await self._gather_prices([h.ticker for h in equities] + [ticker])

        equity_holdings = [
            EquityHolding(
                ticker=h.ticker,
                name=h.name,
                weight=h.weight,
                location=h.location,
                exchange=h.exchange,
                prices=prices,
            )
            for h, prices in zip(equities, series[:-1])
        ]

        return DetailsAggregate(
            ticker=fund.ticker,
            name=fund.name,
            equity_holdings=equity_holdings,
            other_holdings=summarize_other_holdings(fund),
            prices=series[-1],
        )

    # --- Introspection ---

    def stats(self) -> CacheStats:
        return CacheStats(
            details_entries=len(self._details),
            prices_entries=len(self._prices),
            hits=self._details.hits + self._prices.hits,
            misses=self._details.misses + self._prices.misses,
            coalesced=self._details.coalesced + self._prices.coalesced,
        )


def summarize_other_holdings(fund: Fund) -> dict[str, float]:
    """Sum the weights of non-equity holdings per asset class."""
    totals: dict[str, float] = {}
    for holding in fund.holdings:
        if not holding.is_equity:
            totals[holding.asset_class] = totals.get(holding.asset_class, 0.0) + holding.weight
    return totals
