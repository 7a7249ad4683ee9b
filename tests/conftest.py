"""Shared pytest fixtures for fundscope."""

from __future__ import annotations

import asyncio

import pytest

from fundscope.core.exceptions import FetchError, NotFoundError
from fundscope.core.models import (
    SECONDS_PER_DAY,
    Fund,
    FundListItem,
    HistoricalPricePoint,
    Holding,
)

# 2022-01-03 00:00 UTC
DAY0 = 1_641_168_000


def day(n: int) -> int:
    """UTC-midnight timestamp ``n`` days after DAY0."""
    return DAY0 + n * SECONDS_PER_DAY


def point(ts: int, close: float) -> HistoricalPricePoint:
    return HistoricalPricePoint(
        timestamp=ts,
        volume=1000,
        open=close,
        low=close,
        high=close,
        close=close,
        adjclose=close,
    )


def series(closes: dict[int, float]) -> list[HistoricalPricePoint]:
    """Build a sorted series from ``{day_index: close}``."""
    return [point(day(n), c) for n, c in sorted(closes.items())]


def holding(ticker: str, weight: float, asset_class: str = "Equity", **kw) -> Holding:
    return Holding(
        ticker=ticker,
        name=kw.pop("name", f"{ticker} INC"),
        asset_class=asset_class,
        weight=weight,
        **kw,
    )


class StubProvider:
    """In-memory provider that counts calls."""

    def __init__(
        self,
        name: str,
        funds: dict[str, Fund] | None = None,
        catalog_error: Exception | None = None,
        fetch_delay: float = 0.0,
    ) -> None:
        self._name = name
        self.funds = funds or {}
        self.catalog_error = catalog_error
        self.fetch_delay = fetch_delay
        self.catalog_calls = 0
        self.fetch_calls: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    async def catalog(self) -> list[FundListItem]:
        self.catalog_calls += 1
        if self.catalog_error is not None:
            raise self.catalog_error
        return [FundListItem(ticker=f.ticker, name=f.name) for f in self.funds.values()]

    async def fetch(self, ticker: str) -> Fund:
        self.fetch_calls.append(ticker)
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        fund = self.funds.get(ticker)
        if fund is None:
            raise NotFoundError(f"{ticker} unknown to {self._name}", context={"ticker": ticker})
        return fund


class StubPriceSource:
    """In-memory price source that counts calls and can fail per ticker."""

    def __init__(
        self,
        prices: dict[str, list[HistoricalPricePoint]] | None = None,
        failing: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.prices = prices or {}
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.peak = 0

    @property
    def name(self) -> str:
        return "stub_prices"

    async def fetch_series(self, ticker: str) -> list[HistoricalPricePoint]:
        self.calls.append(ticker)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if ticker in self.failing or ticker not in self.prices:
                raise FetchError(f"no prices for {ticker}", context={"ticker": ticker})
            return self.prices[ticker]
        finally:
            self.active -= 1


@pytest.fixture
def sample_fund() -> Fund:
    return Fund(
        ticker="ICLN",
        name="iShares Global Clean Energy ETF",
        last_update="Jan 14, 2022",
        outstanding_shares=110_850_000.0,
        holdings=[
            holding("ENPH", 8.0, exchange="NASDAQ", location="United States"),
            holding("VWS.CO", 6.0, exchange="Omx Nordic Exchange Copenhagen A/S"),
            holding("USD", 0.5, asset_class="Cash"),
            holding("XTSLA", 0.3, asset_class="Money Market"),
            holding("EUR", 0.2, asset_class="Cash"),
        ],
    )


@pytest.fixture
def sample_prices() -> dict[str, list[HistoricalPricePoint]]:
    return {
        "ICLN": series({0: 20.0, 1: 21.0, 2: 22.0, 3: 24.0}),
        "ENPH": series({0: 150.0, 1: 160.0, 2: 155.0, 3: 170.0}),
        "VWS.CO": series({0: 200.0, 2: 210.0, 3: 220.0}),
    }


@pytest.fixture
def stub_provider(sample_fund) -> StubProvider:
    return StubProvider("stub", funds={sample_fund.ticker: sample_fund})


@pytest.fixture
def stub_prices(sample_prices) -> StubPriceSource:
    return StubPriceSource(prices=sample_prices)
