"""fundscope.core: foundation types, config, and exceptions."""

from fundscope.core.config import (
    APIConfig,
    CacheConfig,
    FundscopeConfig,
    ISharesConfig,
    LoggingConfig,
    YahooConfig,
    load_config,
)
from fundscope.core.exceptions import (
    ChartError,
    ConfigError,
    FetchError,
    FundscopeError,
    NotFoundError,
    is_not_found,
)
from fundscope.core.models import (
    EQUITY_ASSET_CLASS,
    AlignedRow,
    AssetClass,
    ChartAggregate,
    ChartHolding,
    ChartPoint,
    DetailsAggregate,
    EquityHolding,
    Fund,
    FundListItem,
    HistoricalPricePoint,
    Holding,
    Ticker,
    Timestamp,
)

__all__ = [
    # Type aliases
    "AssetClass",
    "Ticker",
    "Timestamp",
    "EQUITY_ASSET_CLASS",
    # Fund models
    "FundListItem",
    "Holding",
    "Fund",
    # Price models
    "HistoricalPricePoint",
    # Details models
    "EquityHolding",
    "DetailsAggregate",
    # Chart models
    "AlignedRow",
    "ChartHolding",
    "ChartPoint",
    "ChartAggregate",
    # Config
    "FundscopeConfig",
    "YahooConfig",
    "ISharesConfig",
    "CacheConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "FundscopeError",
    "ConfigError",
    "NotFoundError",
    "FetchError",
    "ChartError",
    "is_not_found",
]
