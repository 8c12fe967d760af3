"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from microdeploy.api.middleware.correlation import CorrelationIdMiddleware
from microdeploy.api.routes import deployment_routes, health_routes
from microdeploy.config import get_settings, Settings


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(
        "application_starting",
        environment=settings.environment.value,
        state_backend=settings.state.backend.value,
        cloud_backend=settings.cloud.backend,
    )
    yield
    logger.info("application_shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="microdeploy",
        description="Teardown of single-instance bootstrap deployments",
        version="0.1.0",
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health_routes.router)
    if settings.observability.metrics_enabled:
        app.include_router(health_routes.metrics_router)
    app.include_router(deployment_routes.router, prefix=settings.api_prefix)

    return app
