"""Fund provider protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fundscope.core.models import Fund, FundListItem


@runtime_checkable
class Provider(Protocol):
    """A data source that can list and fetch funds of one fund family.

    Implementations may keep a single-fetch cache keyed by ticker, but are
    not required to deduplicate concurrent fetches of an uncached ticker.
    """

    @property
    def name(self) -> str: ...

    async def catalog(self) -> list[FundListItem]:
        """Return every fund this provider can serve.

        Raises
        ------
        FetchError
            If the catalog cannot be downloaded or parsed.
        """
        ...

    async def fetch(self, ticker: str) -> Fund:
        """Fetch the full fund record for ``ticker``.

        Raises
        ------
        NotFoundError
            If ``ticker`` is not in this provider's catalog.
        FetchError
            On any network or parse failure.
        """
        ...
