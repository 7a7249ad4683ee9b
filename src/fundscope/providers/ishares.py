"""iShares fund provider.

The catalog comes from the iShares product listing page, whose fund table
is only present inside a ``<noscript>`` block. Holdings come from the
per-product CSV download, which has two tables separated by a blank line:

    Fund Holdings as of,"Jan 14, 2022"
    Shares Outstanding,"110,850,000.00"
    ...

    Ticker,Name,Sector,Asset Class,Market Value,Weight (%),...
    "ENPH","ENPHASE ENERGY INC","Information Technology","Equity",...
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from fundscope.core.config import ISharesConfig
from fundscope.core.exceptions import FetchError, NotFoundError
from fundscope.core.models import Fund, FundListItem, Holding
from fundscope.providers.tickers import fully_qualified_ticker

logger = logging.getLogger(__name__)

_PROVIDER_NAME = "ishares"
_USER_AGENT = "Mozilla/5.0 (compatible; fundscope/0.1)"
_BLANK_LINE = re.compile(r"\n[ \t]*\n")

_INFO_LAST_UPDATE = "Fund Holdings as of"
_INFO_SHARES_OUTSTANDING = "Shares Outstanding"

_REQUIRED_COLUMNS = ("Ticker", "Name", "Asset Class", "Weight (%)")

# Holding field -> CSV column, for the numeric columns
_NUMERIC_COLUMNS = {
    "market_value": "Market Value",
    "notional_value": "Notional Value",
    "shares": "Shares",
    "price": "Price",
    "fx_rate": "FX Rate",
}

# Holding field -> CSV column, for the free-text columns
_TEXT_COLUMNS = {
    "location": "Location",
    "exchange": "Exchange",
    "currency": "Currency",
    "market_currency": "Market Currency",
}


def parse_formatted_float(value: str) -> float:
    """Parse a number with thousands separators, e.g. ``"123,342.28"``.

    iShares writes ``-`` (or nothing) for not-applicable cells; those read
    as 0.0. Anything else that is not a number raises ValueError.
    """
    cleaned = value.strip().replace(",", "")
    if cleaned in ("", "-"):
        return 0.0
    return float(cleaned)


@dataclass(frozen=True)
class _CatalogEntry:
    ticker: str
    name: str
    url: str


class ISharesProvider:
    """Lists iShares ETFs and fetches their holdings.

    Fetched funds are cached per ticker for the life of the instance.
    Concurrent fetches of the same uncached ticker are not deduplicated.
    """

    def __init__(
        self,
        config: ISharesConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or ISharesConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": _USER_AGENT},
            timeout=httpx.Timeout(self._config.request_timeout),
            follow_redirects=True,
        )
        self._catalog: dict[str, _CatalogEntry] | None = None
        self._fetched: dict[str, Fund] = {}

    @property
    def name(self) -> str:
        return _PROVIDER_NAME

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    # --- Catalog ---

    async def catalog(self) -> list[FundListItem]:
        url = f"{self._config.base_url}{self._config.list_path}"
        html = (await self._get(url)).text
        entries = self._parse_catalog(html, url)
        self._catalog = {e.ticker: e for e in entries}
        logger.info("iShares catalog lists %d funds", len(entries))
        return [FundListItem(ticker=e.ticker, name=e.name) for e in entries]

    def _parse_catalog(self, html: str, url: str) -> list[_CatalogEntry]:
        """Read (ticker, name, product URL) triples from the listing page.

        Each fund row has two ``td.links`` cells, ticker then name, both
        linking to the product page.
        """
        document = BeautifulSoup(html, "html.parser")
        noscript = document.find("noscript")
        if noscript is None:
            raise FetchError(
                "Can't find a noscript block on the iShares ETF page",
                context={"url": url, "provider": _PROVIDER_NAME},
            )

        # Depending on the parser the block holds markup or escaped text
        if noscript.find("table") is not None:
            fragment = noscript
        else:
            fragment = BeautifulSoup(noscript.get_text(), "html.parser")

        links = fragment.select("table > tbody > tr > td.links a")
        if len(links) % 2 != 0:
            raise FetchError(
                "The iShares ETF table has a ticker without a name",
                context={"url": url, "provider": _PROVIDER_NAME},
            )

        entries: list[_CatalogEntry] = []
        for ticker_link, name_link in zip(links[::2], links[1::2]):
            href = ticker_link.get("href")
            if not href:
                raise FetchError(
                    "No href on iShares ETF table cell",
                    context={"url": url, "provider": _PROVIDER_NAME},
                )
            entries.append(
                _CatalogEntry(
                    ticker=ticker_link.get_text(strip=True),
                    name=name_link.get_text(strip=True),
                    url=href,
                )
            )
        return entries

    # --- Holdings ---

    async def fetch(self, ticker: str) -> Fund:
        cached = self._fetched.get(ticker)
        if cached is not None:
            return cached

        if self._catalog is None:
            await self.catalog()
        entry = self._catalog.get(ticker) if self._catalog is not None else None
        if entry is None:
            raise NotFoundError(
                f"{ticker} not found in iShares catalog",
                context={"ticker": ticker, "provider": _PROVIDER_NAME},
            )

        url = f"{self._config.base_url}{entry.url}{self._config.holdings_path}"
        text = (await self._get(url)).text
        fund = self._parse_holdings_csv(text, entry, url)
        self._fetched[ticker] = fund
        logger.info("Fetched %d holdings for %s", len(fund.holdings), ticker)
        return fund

    def _parse_holdings_csv(self, text: str, entry: _CatalogEntry, url: str) -> Fund:
        context = {"url": url, "ticker": entry.ticker, "provider": _PROVIDER_NAME}

        ascii_text = text.encode("ascii", errors="ignore").decode("ascii")
        ascii_text = ascii_text.replace("\r\n", "\n").replace("\r", "\n")
        blocks = _BLANK_LINE.split(ascii_text.strip(), maxsplit=2)
        if len(blocks) < 2:
            raise FetchError(
                "Can't find iShares holdings table. CSV format must have changed.",
                context=context,
            )

        try:
            last_update, outstanding_shares = self._parse_info_table(blocks[0])
            holdings = self._parse_holdings_table(blocks[1])
        except (ValueError, csv.Error) as e:
            raise FetchError(f"Could not parse iShares CSV: {e}", context=context) from e

        return Fund(
            ticker=entry.ticker,
            name=entry.name,
            last_update=last_update,
            outstanding_shares=outstanding_shares,
            holdings=holdings,
        )

    def _parse_info_table(self, block: str) -> tuple[str, float]:
        last_update: str | None = None
        outstanding_shares: float | None = None
        for row in csv.reader(io.StringIO(block)):
            if len(row) < 2:
                continue
            key = row[0].strip()
            if key == _INFO_LAST_UPDATE:
                last_update = row[1].strip()
            elif key == _INFO_SHARES_OUTSTANDING:
                outstanding_shares = parse_formatted_float(row[1])

        if last_update is None:
            raise ValueError("no 'Fund Holdings as of' row in info table")
        if outstanding_shares is None:
            raise ValueError("no 'Shares Outstanding' row in info table")
        return last_update, outstanding_shares

    def _parse_holdings_table(self, block: str) -> list[Holding]:
        reader = csv.DictReader(io.StringIO(block))
        columns = [c.strip() for c in (reader.fieldnames or [])]
        missing = [c for c in _REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise ValueError(f"holdings table is missing columns {missing}")
        reader.fieldnames = columns

        holdings: list[Holding] = []
        for row in reader:
            raw_ticker = (row.get("Ticker") or "").strip()
            if not raw_ticker:
                logger.debug("Skipping iShares holding row without ticker: %r", row)
                continue
            exchange = (row.get("Exchange") or "").strip()
            holdings.append(
                Holding(
                    ticker=fully_qualified_ticker(raw_ticker, exchange),
                    name=(row.get("Name") or "").strip(),
                    asset_class=(row.get("Asset Class") or "").strip(),
                    weight=parse_formatted_float(row.get("Weight (%)") or ""),
                    **{
                        field: (row.get(column) or "").strip()
                        for field, column in _TEXT_COLUMNS.items()
                    },
                    **{
                        field: parse_formatted_float(row[column])
                        for field, column in _NUMERIC_COLUMNS.items()
                        if row.get(column) is not None
                    },
                )
            )
        return holdings

    # --- HTTP ---

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(
                f"Request to iShares failed: {e}",
                context={"url": url, "provider": _PROVIDER_NAME, "error": str(e)},
            ) from e

        if response.status_code != 200:
            raise FetchError(
                f"HTTP {response.status_code} from {url}",
                context={
                    "url": url,
                    "provider": _PROVIDER_NAME,
                    "status_code": response.status_code,
                },
            )
        return response
