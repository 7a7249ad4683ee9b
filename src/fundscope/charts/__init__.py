"""Chart construction: series alignment and percentage normalization."""

from fundscope.charts.aligner import align_series
from fundscope.charts.builder import build_chart
from fundscope.charts.normalizer import holding_multipliers, normalize_rows

__all__ = [
    "align_series",
    "build_chart",
    "holding_multipliers",
    "normalize_rows",
]
