"""Merge independently fetched price series onto one shared timestamp axis.

The merge is an inner join: a timestamp survives only if every series that
has data at all has a point there. Series that are missing entirely (None or
empty) are left out of consideration and never block a row.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from fundscope.core.models import AlignedRow, HistoricalPricePoint


def align_series(
    series: Mapping[str, Sequence[HistoricalPricePoint] | None],
) -> list[AlignedRow]:
    """Align series by timestamp, keeping only fully populated rows.

    Each input series must be sorted ascending with unique timestamps. Row
    values are closing prices, keyed in the input mapping's order.

    Runs one round per distinct timestamp: find the smallest unconsumed
    timestamp T across all cursors, consume every cursor sitting on T, and
    emit the row only if no cursor was ahead of T or exhausted.
    """
    keys = [key for key, points in series.items() if points]
    columns = [series[key] for key in keys]
    cursors = [0] * len(keys)

    rows: list[AlignedRow] = []
    while True:
        current: int | None = None
        for column, pos in zip(columns, cursors):
            if pos < len(column):
                ts = column[pos].timestamp
                if current is None or ts < current:
                    current = ts
        if current is None:
            break

        values: dict[str, float] = {}
        gap = False
        for i, column in enumerate(columns):
            pos = cursors[i]
            if pos < len(column) and column[pos].timestamp == current:
                values[keys[i]] = column[pos].close
                cursors[i] = pos + 1
            else:
                gap = True

        if not gap:
            rows.append(AlignedRow(timestamp=current, values=values))

    return rows
