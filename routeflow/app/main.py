"""
Routeflow - Semantic request routing and flow execution

FastAPI application entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routeflow.app.api import runs_router
from routeflow.app.dependencies import get_settings, initialize_services, shutdown_services
from routeflow.pipeline.observability import configure_logging

settings = get_settings()

configure_logging(settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting Routeflow services...")
    try:
        await initialize_services()
        logger.info("Routeflow services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Routeflow services...")
    try:
        await shutdown_services()
        logger.info("Routeflow services shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="Routeflow",
    description="Routes free-text input to typed node flows and streams their output",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(runs_router, prefix="/api/v1")


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns service health status including:
    - Registered providers
    - Routes known to the semantic router
    """
    try:
        from routeflow.app.dependencies import get_orchestrator, get_providers

        orchestrator = get_orchestrator()
        return {
            "status": "healthy",
            "providers": get_providers().list_providers(),
            "routes": [label.value for label in orchestrator.router.labels],
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "routeflow.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
