"""Rebase aligned rows onto a shared "percent of starting ETF value" axis.

The ETF line starts at 100. Each holding line is scaled so that at the last
timestamp it sits at its reported weight times the ETF's overall move
(``weight * last / first``). Stacking the holding lines therefore shows how
much of the ETF's value each holding contributed, consistent with the most
recent weights.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from fundscope.core.exceptions import ChartError
from fundscope.core.models import AlignedRow, ChartPoint

logger = logging.getLogger(__name__)


def holding_multipliers(
    last: AlignedRow,
    etf_key: str,
    weight_multiplier: float,
    weights: Mapping[str, float],
) -> dict[str, float]:
    """Per-holding factor taking a close price onto the percentage axis."""
    multipliers: dict[str, float] = {}
    for key, close in last.values.items():
        if key == etf_key:
            continue
        weight = weights.get(key)
        if weight is None:
            logger.debug("No weight for %s, dropping it from the chart", key)
            continue
        if close == 0:
            logger.warning("Last close for %s is zero, dropping it from the chart", key)
            continue
        multipliers[key] = weight * weight_multiplier / close
    return multipliers


def normalize_rows(
    rows: Sequence[AlignedRow],
    etf_key: str,
    weights: Mapping[str, float],
) -> list[ChartPoint]:
    """Turn aligned close prices into chart points.

    Raises ChartError if there are no rows or the first ETF close is zero.
    Holdings without a value in the last row, without a weight, or with a
    zero last close are left out of every point.
    """
    if not rows:
        raise ChartError(
            "No aligned price rows to normalize",
            context={"ticker": etf_key, "reason": "no_overlap"},
        )

    ordered = sorted(rows, key=lambda r: r.timestamp)
    first_etf = ordered[0].values[etf_key]
    last_etf = ordered[-1].values[etf_key]
    if first_etf == 0:
        raise ChartError(
            f"First {etf_key} price is zero, can't rebase chart",
            context={"ticker": etf_key, "reason": "zero_base_price"},
        )

    # The fund's weights are today's weights, so they are scaled by the
    # ETF's move over the window, e.g. ETF up 20% => holding at weight * 1.2
    weight_multiplier = last_etf / first_etf
    multipliers = holding_multipliers(ordered[-1], etf_key, weight_multiplier, weights)

    points: list[ChartPoint] = []
    for row in ordered:
        holding_prices = {
            key: value * multipliers[key]
            for key, value in row.values.items()
            if key in multipliers
        }
        points.append(
            ChartPoint(
                timestamp=row.timestamp,
                etf_price=row.values[etf_key] / first_etf * 100.0,
                holding_prices=holding_prices,
            )
        )
    return points
