"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from fundscope.aggregation.service import FundService
from fundscope.core.config import FundscopeConfig


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: FundscopeConfig
    service: FundService
    owns_service: bool = True


def get_service(request: Request) -> FundService:
    """Dependency: retrieve the shared fund service."""
    return request.app.state.app_state.service
