"""FastAPI application entry point.

agentvox - voice chat relay for configurable AI agents.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentvox import __version__
from agentvox.api.routes import (
    agents,
    analytics,
    health,
    knowledge,
    metrics,
    voice_chat,
    voices,
)
from agentvox.api.websocket import router as websocket_router
from agentvox.config import get_settings
from agentvox.core.relay import get_session_relay
from agentvox.db.session import close_db, init_db
from agentvox.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Startup:
    - Initialize logging
    - Create database tables

    Shutdown:
    - Complete open voice sessions
    - Close database connections
    """
    settings = get_settings()

    # Startup
    setup_logging(
        level=settings.log_level,
        enable_file=settings.is_production,
    )
    await init_db()
    relay = get_session_relay()

    yield

    # Shutdown
    await relay.close_all()

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="agentvox API",
        description="Voice chat relay for configurable AI agents",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check routes
    app.include_router(health.router, tags=["Health"])

    # Metrics endpoint for Prometheus scraping
    app.include_router(metrics.router, tags=["Observability"])

    # Voice chat session creation
    app.include_router(voice_chat.router, prefix="/api", tags=["Voice Chat"])

    # Agent configuration
    app.include_router(agents.router, prefix="/api", tags=["Agents"])
    app.include_router(voices.router, prefix="/api", tags=["Agents"])

    # Knowledge base and crawling
    app.include_router(knowledge.router, prefix="/api", tags=["Knowledge"])

    # Dashboard analytics
    app.include_router(analytics.router, prefix="/api", tags=["Analytics"])

    # WebSocket endpoint for audio streaming
    app.include_router(websocket_router)

    return app


# Application instance
app = create_app()
