"""Provider registry: merges catalogs and routes detail requests."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from fundscope.core.exceptions import FetchError, FundscopeError, NotFoundError
from fundscope.core.models import Fund, FundListItem
from fundscope.providers.base import Provider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Maps every published fund ticker to the provider that serves it.

    The map is built once by ``build()`` and never changes afterwards.
    When two providers list the same ticker, the provider registered last
    wins; the override is logged. The registry does not cache fund records.
    """

    def __init__(
        self,
        owners: dict[str, Provider],
        funds: list[FundListItem],
        providers: list[Provider],
    ) -> None:
        self._owners = owners
        self._funds = funds
        self._providers = providers

    @classmethod
    async def build(cls, providers: Iterable[Provider]) -> ProviderRegistry:
        """Load every provider's catalog, in order, into one registry.

        A provider whose catalog cannot be loaded is logged and left out;
        the remaining providers are still registered.
        """
        owners: dict[str, Provider] = {}
        positions: dict[str, int] = {}
        funds: list[FundListItem] = []
        active: list[Provider] = []
        dropped = 0

        for provider in providers:
            try:
                catalog = await provider.catalog()
            except Exception as e:
                logger.error(
                    "Dropping provider %s: catalog fetch failed: %s", provider.name, e
                )
                dropped += 1
                continue

            active.append(provider)
            for item in catalog:
                previous = owners.get(item.ticker)
                if previous is not None and previous is not provider:
                    logger.warning(
                        "Ticker %s listed by both %s and %s, using %s",
                        item.ticker, previous.name, provider.name, provider.name,
                    )
                owners[item.ticker] = provider
                if item.ticker in positions:
                    funds[positions[item.ticker]] = item
                else:
                    positions[item.ticker] = len(funds)
                    funds.append(item)

        logger.info(
            "Registered %d funds from %d/%d providers",
            len(funds), len(active), len(active) + dropped,
        )
        return cls(owners=owners, funds=funds, providers=active)

    def list(self) -> list[FundListItem]:
        """Published fund list, in first-seen catalog order."""
        return list(self._funds)

    @property
    def providers(self) -> list[str]:
        """Names of the providers whose catalogs were loaded."""
        return [p.name for p in self._providers]

    def __contains__(self, ticker: object) -> bool:
        return ticker in self._owners

    def __len__(self) -> int:
        return len(self._funds)

    def provider_for(self, ticker: str) -> Provider:
        provider = self._owners.get(ticker)
        if provider is None:
            raise NotFoundError(
                f"Can't find {ticker} in any provider",
                context={"ticker": ticker},
            )
        return provider

    async def fetch_details(self, ticker: str) -> Fund:
        """Fetch a fund record from the provider that owns ``ticker``."""
        provider = self.provider_for(ticker)
        try:
            return await provider.fetch(ticker)
        except FundscopeError:
            raise
        except Exception as e:
            raise FetchError(
                f"Error {provider.name}.fetch({ticker}): {e}",
                context={"ticker": ticker, "provider": provider.name},
            ) from e
