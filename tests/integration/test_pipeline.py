"""End-to-end: iShares catalog and holdings, Yahoo prices, API responses.

Every component is real; only HTTP is mocked with respx.
"""

from __future__ import annotations

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from fundscope.aggregation.service import FundService
from fundscope.api.app import create_app
from fundscope.core.config import FundscopeConfig, YahooConfig
from tests.conftest import day
from tests.ishares_pages import HOLDINGS_CSV, HOLDINGS_URL, LIST_HTML, LIST_URL

pytestmark = pytest.mark.integration

CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
HOUR = 3600


def yahoo_chart(days: dict[int, float], session_utc_hour: int, gmtoffset: int) -> dict:
    """A Yahoo chart payload with one bar per day at the session's UTC time."""
    ordered = sorted(days)
    closes = [days[d] for d in ordered]
    return {
        "chart": {
            "result": [
                {
                    "meta": {"gmtoffset": gmtoffset},
                    "timestamp": [day(d) + session_utc_hour * HOUR for d in ordered],
                    "indicators": {
                        "quote": [
                            {
                                "open": closes,
                                "low": closes,
                                "high": closes,
                                "close": closes,
                                "volume": [1000] * len(closes),
                            }
                        ],
                        "adjclose": [{"adjclose": closes}],
                    },
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def config() -> FundscopeConfig:
    return FundscopeConfig(yahoo=YahooConfig(retry_backoff=0.0, rate_limit=50))


@pytest.fixture
def upstream():
    """Mocked iShares and Yahoo endpoints."""
    with respx.mock(assert_all_called=False) as mock:
        mock.get(LIST_URL).mock(return_value=httpx.Response(200, text=LIST_HTML))
        holdings = mock.get(HOLDINGS_URL).mock(
            return_value=httpx.Response(200, text=HOLDINGS_CSV)
        )
        # New York sessions open at 14:30 UTC, Copenhagen at 08:00 UTC
        mock.get(f"{CHART_URL}/ICLN").mock(
            return_value=httpx.Response(
                200, json=yahoo_chart({0: 20.0, 1: 21.0, 2: 22.0, 3: 24.0}, 14, -5 * HOUR)
            )
        )
        mock.get(f"{CHART_URL}/ENPH").mock(
            return_value=httpx.Response(
                200, json=yahoo_chart({0: 150.0, 1: 160.0, 2: 155.0, 3: 170.0}, 14, -5 * HOUR)
            )
        )
        mock.get(f"{CHART_URL}/VWS.CO").mock(
            return_value=httpx.Response(
                200, json=yahoo_chart({0: 200.0, 2: 210.0, 3: 220.0}, 8, HOUR)
            )
        )
        mock.get(f"{CHART_URL}/0968.HK").mock(return_value=httpx.Response(404))
        yield {"holdings": holdings}


class TestServicePipeline:
    async def test_details_and_chart(self, config, upstream):
        service = await FundService.from_config(config)
        try:
            assert [f.ticker for f in service.list_funds()] == ["ICLN", "IVV"]

            details = await service.details("ICLN")
            assert [h.ticker for h in details.equity_holdings] == ["ENPH", "VWS.CO", "0968.HK"]
            assert details.equity_holdings[2].prices is None
            assert details.other_holdings == {"Cash": pytest.approx(0.50)}
            assert [p.timestamp for p in details.prices] == [day(0), day(1), day(2), day(3)]

            chart = await service.chart("ICLN")
            assert [p.timestamp for p in chart.chart] == [day(0), day(2), day(3)]
            assert set(chart.holding_details) == {"ENPH", "VWS.CO", "0968.HK"}
            assert set(chart.chart[-1].holding_prices) == {"ENPH", "VWS.CO"}
            assert chart.chart[-1].etf_price == pytest.approx(120.0)
            assert chart.chart[-1].holding_prices["ENPH"] == pytest.approx(8.02 * 1.2)
            assert chart.chart[-1].holding_prices["VWS.CO"] == pytest.approx(6.01 * 1.2)

            assert upstream["holdings"].call_count == 1
        finally:
            await service.aclose()


class TestApiPipeline:
    def test_api_end_to_end(self, config, upstream):
        with TestClient(create_app(config=config)) as client:
            funds = client.get("/api/etf/list").json()
            assert [f["ticker"] for f in funds] == ["ICLN", "IVV"]

            chart = client.get("/api/etf_chart/ICLN")
            assert chart.status_code == 200
            assert len(chart.json()["chart"]) == 3

            details = client.get("/api/etf/ICLN")
            assert details.status_code == 200
            assert details.json()["equity_holdings"][2]["prices"] is None

            assert client.get("/api/etf/NOPE").status_code == 404

            health = client.get("/api/health").json()
            assert health["providers"] == ["ishares"]
            assert health["cache"]["details_entries"] == 1
            assert health["cache"]["hits"] >= 1

        assert upstream["holdings"].call_count == 1
