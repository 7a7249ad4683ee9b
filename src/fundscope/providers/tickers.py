"""Qualify provider-native tickers with Yahoo exchange suffixes.

Tickers are only unique within their own exchange. Yahoo makes them globally
unique by appending an exchange suffix (``MEL`` on the New Zealand Exchange is
``MEL.NZ``); US listings carry no suffix. Holdings are qualified this way so
their price series can be fetched.

Fallback policy ``RAW_TICKER_FALLBACK``: when the exchange name is not in the
table, the raw ticker is returned unchanged and a warning is logged once per
exchange. The price fetch for such a holding may then hit the wrong listing or
fail, which degrades to "no series" for that holding.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

RAW_TICKER_FALLBACK = "raw_ticker"

# https://help.yahoo.com/kb/SLN2310.html
EXCHANGE_SUFFIX: dict[str, str] = {
    # United States
    "New York Stock Exchange Inc.": "",
    "NASDAQ": "",
    "Nyse Mkt Llc": "",
    "Cboe BZX formerly known as BATS": "",
    # Australia
    "Asx - All Markets": ".AX",
    # Denmark
    "Omx Nordic Exchange Copenhagen A/S": ".CO",
    # United Kingdom
    "London Stock Exchange": ".L",
    # Spain
    "Bolsa De Madrid": ".MC",
    # Portugal
    "Nyse Euronext - Euronext Lisbon": ".LS",
    # Hong Kong
    "Hong Kong Exchanges And Clearing Ltd": ".HK",
    # Austria
    "Wiener Boerse Ag": ".VI",
    # Germany
    "Xetra": ".DE",
    # Canada
    "Toronto Stock Exchange": ".TO",
    # South Korea
    "Korea Exchange (Stock Market)": ".KS",
    "Korea Exchange (Kosdaq)": ".KQ",
    # New Zealand
    "New Zealand Exchange Ltd": ".NZ",
    # Norway
    "Oslo Bors Asa": ".OL",
    # France
    "Nyse Euronext - Euronext Paris": ".PA",
    # Switzerland
    "SIX Swiss Exchange": ".SW",
    # Japan
    "Tokyo Stock Exchange": ".T",
    # Israel
    "Tel Aviv Stock Exchange": ".TA",
    # Italy
    "Borsa Italiana": ".MI",
    # Sweden
    "Nasdaq Omx Nordic": ".ST",
    # Netherlands
    "Euronext Amsterdam": ".AS",
    # Belgium
    "Nyse Euronext - Euronext Brussels": ".BR",
    # Finland
    "Nasdaq Omx Helsinki Ltd.": ".HE",
    # Singapore
    "Singapore Exchange": ".SI",
    # Ireland
    "Irish Stock Exchange - All Market": ".IR",
}

# Qualified tickers that spreadsheets mangle (leading zeros dropped)
TICKER_OVERRIDES: dict[str, str] = {
    "451.HK": "0451.HK",
    "968.HK": "0968.HK",
}

_warned_exchanges: set[str] = set()


def exchange_suffix(exchange: str) -> str | None:
    """Return the Yahoo suffix for an exchange name, or None if unknown."""
    return EXCHANGE_SUFFIX.get(exchange)


def fully_qualified_ticker(ticker: str, exchange: str) -> str:
    """Return a globally unique ticker usable for price lookups.

    >>> fully_qualified_ticker("MEL", "New Zealand Exchange Ltd")
    'MEL.NZ'
    >>> fully_qualified_ticker("968", "Hong Kong Exchanges And Clearing Ltd")
    '0968.HK'
    """
    suffix = exchange_suffix(exchange)
    if suffix is None:
        if exchange not in _warned_exchanges:
            _warned_exchanges.add(exchange)
            logger.warning(
                "No ticker suffix for exchange %r, using raw ticker (%s)",
                exchange,
                RAW_TICKER_FALLBACK,
            )
        return ticker

    full = f"{ticker}{suffix}"
    return TICKER_OVERRIDES.get(full, full)
