"""Health check endpoints.

Provides:
- Basic health check (GET /health)
- Detailed health check with dependency status (GET /health/detailed)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox import __version__
from agentvox.config import Settings, get_settings
from agentvox.db.session import get_session, ping_database

router = APIRouter()


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str


class DetailedHealthResponse(BaseModel):
    """Detailed health check response."""

    status: str
    checks: dict[str, str]
    version: str


def _configured(secret) -> str:
    return "configured" if secret and secret.get_secret_value() else "missing"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy")


@router.get("/health/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> DetailedHealthResponse:
    """Detailed health check including dependency status.

    Checks database connectivity and whether each provider has a
    credential configured (providers are not called).
    """
    checks = {"database": await ping_database(session)}

    checks["deepgram"] = _configured(settings.deepgram_api_key)
    checks["groq"] = _configured(settings.groq_api_key)
    checks["elevenlabs"] = _configured(settings.elevenlabs_api_key)
    checks["firecrawl"] = _configured(settings.firecrawl_api_key)

    status = "healthy" if checks["database"] == "ok" else "degraded"

    return DetailedHealthResponse(
        status=status,
        checks=checks,
        version=__version__,
    )
