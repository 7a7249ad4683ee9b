"""fundscope: ETF holdings aggregation and holding-contribution charts."""

__version__ = "0.1.0"
