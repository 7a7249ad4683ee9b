"""FastAPI route definitions for the fundscope API.

Tickers are passed through verbatim; they are provider-native and
case-sensitive. Errors are translated by the handlers in ``app.py``.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

import fundscope
from fundscope.aggregation.service import FundService
from fundscope.api.deps import get_service
from fundscope.api.schemas import CacheStatsResponse, ErrorResponse, HealthResponse
from fundscope.core.models import ChartAggregate, DetailsAggregate, FundListItem

router = APIRouter()

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "No provider serves this ticker"},
    500: {"model": ErrorResponse, "description": "Upstream fetch or chart failure"},
}


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(service: FundService = Depends(get_service)):
    """Service health, registered providers, and cache counters."""
    return HealthResponse(
        status="ok",
        version=fundscope.__version__,
        providers=service.registry.providers,
        funds=len(service.registry),
        cache=CacheStatsResponse(**asdict(service.stats())),
    )


# -- Funds --


@router.get("/etf/list", response_model=list[FundListItem])
async def list_funds(service: FundService = Depends(get_service)):
    """Every fund any registered provider can serve."""
    return service.list_funds()


@router.get("/etf/{ticker}", response_model=DetailsAggregate, responses=_ERROR_RESPONSES)
async def fund_details(ticker: str, service: FundService = Depends(get_service)):
    """Holdings, allocation, and price history for one fund."""
    return await service.details(ticker)


@router.get("/etf_chart/{ticker}", response_model=ChartAggregate, responses=_ERROR_RESPONSES)
async def fund_chart(ticker: str, service: FundService = Depends(get_service)):
    """The fund and its equity holdings on one percentage axis."""
    return await service.chart(ticker)
