"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fundscope.aggregation.service import FundService
from fundscope.api.deps import AppState
from fundscope.api.routes import router
from fundscope.core.config import FundscopeConfig, load_config
from fundscope.core.exceptions import FundscopeError, NotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config
    service = app.state._pending_service
    owns_service = service is None
    if owns_service:
        service = await FundService.from_config(config)

    app.state.app_state = AppState(config=config, service=service, owns_service=owns_service)

    yield

    if owns_service:
        await service.aclose()


def create_app(
    config: FundscopeConfig | None = None,
    service: FundService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without ``config`` the file named by ``FUNDSCOPE_CONFIG`` (or
    ``./fundscope.yml``) is loaded; ``fundscope serve`` exports that variable
    for the uvicorn factory call.

    Pass ``service`` to reuse an already wired FundService (tests,
    embedding); otherwise one is built from ``config`` at startup and closed
    at shutdown.
    """
    import fundscope

    config = config or load_config()
    app = FastAPI(
        title="fundscope API",
        description="ETF holdings and holding-contribution charts",
        version=fundscope.__version__,
        lifespan=lifespan,
    )

    # Stash config/service so lifespan can retrieve them
    app.state._pending_config = config
    app.state._pending_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    # Exception handlers
    @app.exception_handler(FundscopeError)
    async def fundscope_exception_handler(request: Request, exc: FundscopeError):
        status = 404 if isinstance(exc, NotFoundError) else 500
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, exc)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app
