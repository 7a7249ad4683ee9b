"""Pydantic data models, the system's type contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Ticker = str
AssetClass = str
Timestamp = int

# Only holdings of this asset class are enriched with price history.
EQUITY_ASSET_CLASS: AssetClass = "Equity"

SECONDS_PER_DAY = 86_400


# --- Fund Models ---


class FundListItem(BaseModel):
    """Catalog entry: a fund a provider can serve."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str


class Holding(BaseModel):
    """A single position inside a fund, as reported by its provider.

    `weight` is a percentage of the fund (0–100). Weights are taken as
    reported and are not required to sum to 100.
    """

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str
    asset_class: AssetClass
    weight: float
    location: str = ""
    exchange: str = ""
    currency: str = ""
    market_currency: str = ""
    fx_rate: float = 1.0
    price: float = 0.0
    shares: float = 0.0
    market_value: float = 0.0
    notional_value: float = 0.0

    @property
    def is_equity(self) -> bool:
        return self.asset_class == EQUITY_ASSET_CLASS


class Fund(BaseModel):
    """A fund record with holdings in provider order."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str
    last_update: str
    outstanding_shares: float
    holdings: list[Holding]


# --- Price Models ---


class HistoricalPricePoint(BaseModel):
    """One daily bar, timestamped at UTC midnight of the trading day."""

    model_config = ConfigDict(frozen=True)

    timestamp: Timestamp
    volume: int
    open: float
    low: float
    high: float
    close: float
    adjclose: float

    @field_validator("timestamp")
    @classmethod
    def timestamp_is_midnight(cls, v: int) -> int:
        if v % SECONDS_PER_DAY != 0:
            raise ValueError(f"timestamp must be at UTC midnight, got {v}")
        return v

    @field_validator("volume")
    @classmethod
    def volume_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"volume must be >= 0, got {v}")
        return v


# --- Details Models ---


class EquityHolding(BaseModel):
    """An equity holding enriched with its price series, if one could be fetched."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str
    weight: float
    location: str
    exchange: str
    prices: list[HistoricalPricePoint] | None = None


class DetailsAggregate(BaseModel):
    """Everything known about a fund: holdings, price history, allocation."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str
    equity_holdings: list[EquityHolding]
    other_holdings: dict[AssetClass, float]
    prices: list[HistoricalPricePoint] | None = None


# --- Chart Models ---


class AlignedRow(BaseModel):
    """Closing prices of every considered series at one shared timestamp."""

    model_config = ConfigDict(frozen=True)

    timestamp: Timestamp
    values: dict[str, float]


class ChartHolding(BaseModel):
    """Display metadata for a holding line on the chart."""

    model_config = ConfigDict(frozen=True)

    ticker: Ticker
    name: str


class ChartPoint(BaseModel):
    """One x-axis position on the percentage-of-starting-ETF-value scale."""

    model_config = ConfigDict(frozen=True)

    timestamp: Timestamp
    etf_price: float
    holding_prices: dict[Ticker, float]


class ChartAggregate(BaseModel):
    """A ready-to-draw chart for an ETF and its equity holdings."""

    model_config = ConfigDict(frozen=True)

    etf_ticker: Ticker
    etf_name: str
    holding_details: dict[Ticker, ChartHolding]
    chart: list[ChartPoint]
