"""Outward-facing fund operations used by the HTTP API and the CLI."""

from __future__ import annotations

import logging
from typing import Any

from fundscope.aggregation.cache import AggregationCache, CacheStats
from fundscope.charts.builder import build_chart
from fundscope.core.config import FundscopeConfig
from fundscope.core.models import ChartAggregate, DetailsAggregate, FundListItem
from fundscope.prices.yahoo import YahooPriceSource
from fundscope.providers.base import Provider
from fundscope.providers.ishares import ISharesProvider
from fundscope.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class FundService:
    """List funds, build their details, and chart them.

    One instance is created per process and shared by every request.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        cache: AggregationCache,
        resources: list[Any] | None = None,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self._resources = resources or []

    @classmethod
    async def from_config(cls, config: FundscopeConfig) -> FundService:
        """Wire the configured providers and the Yahoo price source.

        Loads every provider catalog, so this performs network requests.
        """
        providers: list[Provider] = []
        if config.ishares.enabled:
            providers.append(ISharesProvider(config.ishares))
        if not providers:
            logger.warning("No fund providers enabled, the fund list will be empty")

        registry = await ProviderRegistry.build(providers)
        price_source = YahooPriceSource(config.yahoo)
        cache = AggregationCache(registry, price_source, config.cache)
        return cls(registry, cache, resources=[*providers, price_source])

    async def aclose(self) -> None:
        """Close HTTP clients owned by the wired providers and price source."""
        for resource in self._resources:
            aclose = getattr(resource, "aclose", None)
            if aclose is not None:
                await aclose()

    def list_funds(self) -> list[FundListItem]:
        return self.registry.list()

    async def details(self, ticker: str) -> DetailsAggregate:
        return await self.cache.details(ticker)

    async def chart(self, ticker: str) -> ChartAggregate:
        """Chart a fund against its holdings.

        Raises:
            NotFoundError: No provider serves ``ticker``.
            FetchError: The fund record could not be fetched.
            ChartError: No ETF price series, or no shared trading days.
        """
        logger.info("Chart %s: loading details", ticker)
        details = await self.details(ticker)
        logger.info("Chart %s: merging prices", ticker)
        return build_chart(details)

    def stats(self) -> CacheStats:
        return self.cache.stats()
