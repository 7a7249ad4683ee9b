"""Yahoo Finance price source: direct HTTP implementation.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint via httpx. Daily bars
are requested for a fixed lookback range (``YahooConfig.range``).

Yahoo stamps each daily bar with the exchange-local session time. The adapter
shifts every timestamp by ``meta.gmtoffset`` and floors it to midnight, so a
bar is keyed by the calendar day it traded on regardless of exchange time zone.
That is what lets series from different exchanges line up on one chart.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from aiolimiter import AsyncLimiter

from fundscope.core.config import YahooConfig
from fundscope.core.exceptions import FetchError
from fundscope.core.models import SECONDS_PER_DAY, HistoricalPricePoint

logger = logging.getLogger(__name__)

_CHART_PATH = "/v8/finance/chart"
_USER_AGENT = "Mozilla/5.0 (compatible; fundscope/0.1)"
_SOURCE_NAME = "yahoo_finance"

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}
_DEFAULT_RETRY_AFTER = 2.0


def _to_trading_day(timestamp: int, gmtoffset: int) -> int:
    """Shift a UTC epoch to exchange-local time and floor it to midnight."""
    local = timestamp + gmtoffset
    return local - (local % SECONDS_PER_DAY)


class YahooChartAdapter:
    """Transforms the ``chart.result[0]`` object into HistoricalPricePoints.

    Bars with a null open/low/high/close/adjclose (holidays, halted sessions)
    are skipped. A null volume is read as 0. When two bars land on the same
    trading day the later one wins.
    """

    def adapt(self, raw_data: Any, ticker: str) -> list[HistoricalPricePoint]:
        timestamps: list[int] = raw_data.get("timestamp") or []
        if not timestamps:
            return []

        gmtoffset = int(raw_data.get("meta", {}).get("gmtoffset", 0) or 0)
        indicators = raw_data.get("indicators", {})

        quotes = indicators.get("quote") or []
        if not quotes:
            raise FetchError(
                f"Yahoo response for {ticker} had no quotes",
                context={"ticker": ticker, "provider": _SOURCE_NAME},
            )
        adjcloses = indicators.get("adjclose") or []
        if not adjcloses:
            raise FetchError(
                f"Yahoo response for {ticker} had no adjclose",
                context={"ticker": ticker, "provider": _SOURCE_NAME},
            )

        quote = quotes[0]
        columns = {
            "open": quote.get("open") or [],
            "low": quote.get("low") or [],
            "high": quote.get("high") or [],
            "close": quote.get("close") or [],
            "adjclose": adjcloses[0].get("adjclose") or [],
        }
        volumes: list[int | None] = quote.get("volume") or []

        by_day: dict[int, HistoricalPricePoint] = {}
        skipped = 0
        for i, ts in enumerate(timestamps):
            values = {
                key: (col[i] if i < len(col) else None) for key, col in columns.items()
            }
            if any(v is None for v in values.values()):
                skipped += 1
                continue

            volume = volumes[i] if i < len(volumes) else None
            day = _to_trading_day(int(ts), gmtoffset)
            by_day[day] = HistoricalPricePoint(
                timestamp=day,
                volume=int(volume) if volume is not None else 0,
                open=float(values["open"]),
                low=float(values["low"]),
                high=float(values["high"]),
                close=float(values["close"]),
                adjclose=float(values["adjclose"]),
            )

        if skipped:
            logger.debug("Skipped %d incomplete Yahoo bars for %s", skipped, ticker)

        return [by_day[day] for day in sorted(by_day)]


class YahooPriceSource:
    """Fetches daily price series from Yahoo Finance's chart API.

    Every request passes through an ``aiolimiter`` token bucket and carries an
    explicit timeout. Rate limiting (429), server errors, timeouts, and
    connection failures are retried with exponential backoff up to
    ``max_retries`` times; anything else fails fast with ``FetchError``.

    Parameters
    ----------
    config : YahooConfig
        Endpoint, range, timeout, and retry settings.
    client : httpx.AsyncClient | None
        Shared client. When omitted the source creates and owns one.
    adapter : YahooChartAdapter | None
        Custom adapter instance. Uses default if None.
    """

    def __init__(
        self,
        config: YahooConfig | None = None,
        client: httpx.AsyncClient | None = None,
        adapter: YahooChartAdapter | None = None,
    ) -> None:
        self._config = config or YahooConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": _USER_AGENT},
            timeout=httpx.Timeout(self._config.request_timeout),
        )
        self._adapter = adapter or YahooChartAdapter()
        self._limiter = AsyncLimiter(max_rate=self._config.rate_limit, time_period=1.0)

    @property
    def name(self) -> str:
        return _SOURCE_NAME

    async def __aenter__(self) -> YahooPriceSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    def _chart_url(self, ticker: str) -> str:
        return f"{self._config.base_url}{_CHART_PATH}/{ticker}"

    async def fetch_series(self, ticker: str) -> list[HistoricalPricePoint]:
        """Fetch and adapt the daily series for a single ticker."""
        url = self._chart_url(ticker)
        params = {"interval": self._config.interval, "range": self._config.range}

        response = await self._request(url, ticker, params)
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                f"Yahoo returned invalid JSON for {ticker}",
                context={"url": url, "ticker": ticker, "provider": _SOURCE_NAME},
            ) from e

        chart = data.get("chart") or {}
        if chart.get("error"):
            err = chart["error"]
            raise FetchError(
                f"Yahoo API error for {ticker}: {err.get('code')}: {err.get('description')}",
                context={"url": url, "ticker": ticker, "provider": _SOURCE_NAME},
            )

        results = chart.get("result")
        if not results:
            raise FetchError(
                f"Yahoo response for {ticker} had no results",
                context={"url": url, "ticker": ticker, "provider": _SOURCE_NAME},
            )

        try:
            series = self._adapter.adapt(results[0], ticker)
        except FetchError:
            raise
        except (TypeError, ValueError, KeyError) as e:
            raise FetchError(
                f"Could not parse Yahoo chart for {ticker}: {e}",
                context={"url": url, "ticker": ticker, "provider": _SOURCE_NAME},
            ) from e

        logger.info("Fetched %d price points for %s", len(series), ticker)
        return series

    async def _request(
        self,
        url: str,
        ticker: str,
        params: dict[str, str],
    ) -> httpx.Response:
        """GET with rate limiting and bounded retries.

        Retry policy:
            - HTTP 429: wait Retry-After (or backoff), retry.
            - HTTP 500/502/503/504: exponential backoff, retry.
            - Timeouts and transport errors: exponential backoff, retry.
            - Other non-200: raise immediately.
        """
        max_retries = self._config.max_retries
        context = {"url": url, "ticker": ticker, "provider": _SOURCE_NAME}

        for attempt in range(max_retries + 1):
            delay = self._config.retry_backoff * 2**attempt
            try:
                async with self._limiter:
                    response = await self._client.get(url, params=params)
            except httpx.TransportError as e:
                if attempt < max_retries:
                    logger.warning(
                        "Transport error on %s (%s), retrying in %.1fs (attempt %d/%d)",
                        url, type(e).__name__, delay, attempt + 1, max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise FetchError(
                    f"Request to Yahoo failed for {ticker}: {e}",
                    context={**context, "error": str(e)},
                ) from e

            if response.status_code == 200:
                return response

            if response.status_code in _RETRYABLE_STATUS and attempt < max_retries:
                if response.status_code == 429:
                    delay = _retry_after(response, default=max(delay, _DEFAULT_RETRY_AFTER))
                logger.warning(
                    "HTTP %d on %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code, url, delay, attempt + 1, max_retries,
                )
                await asyncio.sleep(delay)
                continue

            raise FetchError(
                f"HTTP {response.status_code} from Yahoo for {ticker}",
                context={**context, "status_code": response.status_code},
            )

        # Loop always returns or raises
        raise FetchError(f"Request to Yahoo failed for {ticker}", context=context)


def _retry_after(response: httpx.Response, default: float) -> float:
    """Seconds to wait according to a Retry-After header, if it is numeric."""
    header = response.headers.get("Retry-After")
    if header is None:
        return default
    try:
        return max(float(header), 0.0)
    except ValueError:
        return default
