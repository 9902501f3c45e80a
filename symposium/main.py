"""Symposium FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from symposium import __version__
from symposium.api.routes import router as api_router
from symposium.api.stream import router as stream_router
from symposium.config import Settings, get_settings
from symposium.coordinator.engine import close_coordinator, get_coordinator
from symposium.lib.connections import close_connection_manager
from symposium.lib.dispatch import TOOLS, reset_dispatcher
from symposium.lib.exceptions import (
    ConnectionNotFoundError,
    SessionNotFoundError,
    SymposiumError,
    ToolNotFoundError,
)
from symposium.lib.models import ConfigResponse, HealthResponse

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    settings = get_settings()

    # Startup
    logger.info("Starting Symposium...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(
        f"Quiet period: {settings.quiet_period_seconds}s, "
        f"max rounds: {settings.max_rounds}, "
        f"inline responses on submit: {settings.inline_responses_on_submit}"
    )
    get_coordinator()

    yield

    # Shutdown
    logger.info("Shutting down Symposium...")
    await close_connection_manager()
    await close_coordinator()
    reset_dispatcher()
    logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Symposium",
        description="Coordinator for multi-party, round-based debates",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    register_exception_handlers(app)

    # Routes
    app.include_router(api_router, prefix="/api")
    app.include_router(stream_router, tags=["Transport"])

    # Root endpoints
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", version=__version__)

    @app.get("/api/config", response_model=ConfigResponse, tags=["Config"])
    async def get_config(
        settings: Settings = Depends(get_settings),
    ) -> ConfigResponse:
        """Get the effective coordinator configuration."""
        return ConfigResponse(
            quiet_period_seconds=settings.quiet_period_seconds,
            max_rounds=settings.max_rounds,
            inline_responses_on_submit=settings.inline_responses_on_submit,
            partition_by_topic=settings.partition_by_topic,
            tools=[spec.name for spec in TOOLS],
        )

    return app


# =============================================================================
# Exception Handlers
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(
        request: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.message, "key": exc.key},
        )

    @app.exception_handler(ConnectionNotFoundError)
    async def connection_not_found_handler(
        request: Request, exc: ConnectionNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.message, "connection_id": exc.connection_id},
        )

    @app.exception_handler(ToolNotFoundError)
    async def tool_not_found_handler(
        request: Request, exc: ToolNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.message, "tool": exc.tool_name},
        )

    @app.exception_handler(SymposiumError)
    async def symposium_error_handler(
        request: Request, exc: SymposiumError
    ) -> JSONResponse:
        logger.error(f"Symposium error: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"detail": exc.message, "details": exc.details},
        )


# =============================================================================
# Application Instance
# =============================================================================


app = create_app()
