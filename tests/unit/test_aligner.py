"""Tests for the series aligner (inner join on timestamp)."""

from __future__ import annotations

from fundscope.charts.aligner import align_series
from tests.conftest import day, series


class TestAlignSeries:
    def test_drops_timestamp_missing_from_one_series(self):
        rows = align_series({"A": series({0: 10.0, 1: 11.0}), "B": series({0: 100.0})})
        assert len(rows) == 1
        assert rows[0].timestamp == day(0)
        assert rows[0].values == {"A": 10.0, "B": 100.0}

    def test_identical_axes(self):
        rows = align_series(
            {"A": series({0: 1.0, 1: 2.0, 2: 3.0}), "B": series({0: 4.0, 1: 5.0, 2: 6.0})}
        )
        assert [r.timestamp for r in rows] == [day(0), day(1), day(2)]
        assert [r.values["B"] for r in rows] == [4.0, 5.0, 6.0]

    def test_interleaved_gaps(self):
        rows = align_series(
            {
                "ETF": series({0: 1.0, 1: 1.0, 2: 1.0, 3: 1.0, 4: 1.0}),
                "A": series({0: 2.0, 2: 2.0, 3: 2.0, 4: 2.0}),
                "B": series({1: 3.0, 2: 3.0, 4: 3.0}),
            }
        )
        assert [r.timestamp for r in rows] == [day(2), day(4)]

    def test_disjoint_series(self):
        assert align_series({"A": series({0: 1.0}), "B": series({1: 1.0})}) == []

    def test_missing_series_excluded(self):
        rows = align_series({"A": series({0: 1.0, 1: 2.0}), "B": None, "C": []})
        assert [r.timestamp for r in rows] == [day(0), day(1)]
        assert all(set(r.values) == {"A"} for r in rows)

    def test_all_missing(self):
        assert align_series({"A": None, "B": []}) == []

    def test_empty_mapping(self):
        assert align_series({}) == []

    def test_single_series_passes_through(self):
        rows = align_series({"A": series({0: 1.0, 5: 2.0})})
        assert [r.values["A"] for r in rows] == [1.0, 2.0]

    def test_row_values_follow_key_order(self):
        rows = align_series({"ETF": series({0: 1.0}), "Z": series({0: 2.0}), "A": series({0: 3.0})})
        assert list(rows[0].values) == ["ETF", "Z", "A"]

    def test_uses_close_price(self):
        from fundscope.core.models import HistoricalPricePoint

        bar = HistoricalPricePoint(
            timestamp=day(0), volume=1, open=1.0, low=0.5, high=2.0, close=1.5, adjclose=1.4
        )
        assert align_series({"A": [bar]})[0].values["A"] == 1.5

    def test_every_row_has_every_present_key(self):
        inputs = {
            "A": series({n: float(n) for n in range(0, 20, 2)}),
            "B": series({n: float(n) for n in range(0, 20, 3)}),
            "C": series({n: float(n) for n in range(20)}),
        }
        rows = align_series(inputs)
        assert [r.timestamp for r in rows] == [day(0), day(6), day(12), day(18)]
        for row in rows:
            assert set(row.values) == {"A", "B", "C"}
        assert [r.timestamp for r in rows] == sorted(r.timestamp for r in rows)

    def test_identical_series_reproduced(self):
        closes = {0: 10.0, 1: 10.5, 3: 9.75, 7: 11.25}
        rows = align_series({f"S{i}": series(closes) for i in range(5)})
        assert [r.timestamp for r in rows] == [day(n) for n in sorted(closes)]
        for row, close in zip(rows, (closes[n] for n in sorted(closes))):
            assert row.values == {f"S{i}": close for i in range(5)}

    def test_disjoint_many_series(self):
        inputs = {f"S{i}": series({i: 1.0, i + 10: 2.0}) for i in range(4)}
        assert align_series(inputs) == []

    def test_same_input_same_rows(self):
        inputs = {
            "ETF": series({0: 1.0, 1: 2.0, 2: 3.0}),
            "A": series({1: 4.0, 2: 5.0}),
        }
        assert align_series(inputs) == align_series(inputs)
