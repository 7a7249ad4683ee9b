"""Aggregation layer: cache-aside fund details and the outward fund service."""

from fundscope.aggregation.cache import AggregationCache, CacheStats, summarize_other_holdings
from fundscope.aggregation.service import FundService

__all__ = [
    "AggregationCache",
    "CacheStats",
    "FundService",
    "summarize_other_holdings",
]
