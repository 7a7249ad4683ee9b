"""API-specific response schemas (Pydantic v2).

Fund, details, and chart payloads are the core models themselves; only the
envelopes that exist purely for HTTP live here.
"""

from __future__ import annotations

from pydantic import BaseModel


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


# -- Health --


class CacheStatsResponse(BaseModel):
    """Aggregation cache counters."""

    details_entries: int
    prices_entries: int
    hits: int
    misses: int
    coalesced: int


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
    providers: list[str]
    funds: int
    cache: CacheStatsResponse
