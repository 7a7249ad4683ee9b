"""Build a ChartAggregate from a fund's details."""

from __future__ import annotations

import logging

from fundscope.charts.aligner import align_series
from fundscope.charts.normalizer import normalize_rows
from fundscope.core.exceptions import ChartError
from fundscope.core.models import (
    ChartAggregate,
    ChartHolding,
    DetailsAggregate,
    HistoricalPricePoint,
)

logger = logging.getLogger(__name__)


def build_chart(details: DetailsAggregate) -> ChartAggregate:
    """Align and normalize the ETF and holding price series of a fund.

    Every equity holding is listed in ``holding_details``; only those with
    price data on every charted day end up in the chart points.

    Raises:
        ChartError: If the ETF has no price series or no day is shared by
            every available series.
    """
    if not details.prices:
        raise ChartError(
            f"ETF price not available for {details.ticker}",
            context={"ticker": details.ticker, "reason": "no_etf_prices"},
        )

    series: dict[str, list[HistoricalPricePoint] | None] = {details.ticker: details.prices}
    weights: dict[str, float] = {}
    holding_details: dict[str, ChartHolding] = {}

    for holding in details.equity_holdings:
        holding_details[holding.ticker] = ChartHolding(ticker=holding.ticker, name=holding.name)
        if holding.ticker == details.ticker:
            logger.warning(
                "%s holds its own ticker, leaving that holding off the chart",
                details.ticker,
            )
            continue
        series[holding.ticker] = holding.prices
        weights[holding.ticker] = holding.weight

    rows = align_series(series)
    if not rows:
        raise ChartError(
            f"No overlapping price history for {details.ticker} and its holdings",
            context={"ticker": details.ticker, "reason": "no_overlap"},
        )
    logger.debug("Aligned %d rows across %d series for %s", len(rows), len(series), details.ticker)

    return ChartAggregate(
        etf_ticker=details.ticker,
        etf_name=details.name,
        holding_details=holding_details,
        chart=normalize_rows(rows, details.ticker, weights),
    )
