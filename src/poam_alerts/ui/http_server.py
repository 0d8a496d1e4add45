"""
Main HTTP server for the POAM notification API.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from poam_alerts import __version__
from poam_alerts.engine import AlertingEngine
from poam_alerts.ui.api import router as api_router

logger = logging.getLogger(__name__)


def create_app(engine: Optional[AlertingEngine] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        engine: Pre-built engine (default: built from configuration at startup)

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine = engine or AlertingEngine()
        await app.state.engine.start()
        try:
            yield
        finally:
            await app.state.engine.close()

    app = FastAPI(
        title="POAM Notification API",
        description="Deadline alerts and notification center for POAM tracking",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("API_CORS_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "POAM Notification API",
            "version": __version__,
            "endpoints": {
                "notifications": "/api/notifications",
                "preferences": "/api/preferences",
                "checks": "/api/checks",
                "docs": "/docs",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """
    Run the API server.

    Args:
        host: Bind address (default: API_HOST or 127.0.0.1)
        port: Port (default: API_PORT or 8000)
    """
    host = host or os.getenv("API_HOST", "127.0.0.1")
    port = port or int(os.getenv("API_PORT", "8000"))

    logger.info("=" * 60)
    logger.info("POAM Notification API")
    logger.info("=" * 60)
    logger.info(f"Host: {host}")
    logger.info(f"Port: {port}")
    logger.info(f"API Documentation: http://{host}:{port}/docs")
    logger.info("=" * 60)

    uvicorn.run(create_app(), host=host, port=port)
