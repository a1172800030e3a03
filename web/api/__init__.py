"""FastAPI backend for the memory match web UI."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.settings import Settings
from web.api.routes import games
from web.api.session_manager import session_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - report configuration, close providers on shutdown."""
    settings = session_manager.settings
    logger.info(
        f"Memory match API starting: provider={settings.provider}, "
        f"delays={settings.match_delay_ms}/{settings.mismatch_delay_ms}ms"
    )
    yield
    for summary in session_manager.list_sessions():
        await session_manager.delete_session(summary["id"])
    logger.info("Memory match API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application."""
    if settings is not None:
        session_manager.configure(settings)
    settings = session_manager.settings

    app = FastAPI(
        title="Memory Match API",
        description="Two-player memory matching game with generated character cards",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Configure CORS for frontend
    logger.info(f"CORS origins configured: {list(settings.cors_origins)}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(games.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
