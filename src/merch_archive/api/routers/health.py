# Hey future me - health checks for Docker / uptime monitors.
#
# Endpoints:
# - /health/live   → the process answers (no dependency checks)
# - /health/ready  → the database answers a SELECT 1; 503 otherwise
#
# Docker HEALTHCHECK: curl -f http://localhost:8000/api/health/live || exit 1
"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from merch_archive.api.dependencies import get_app_settings
from merch_archive.config import Settings
from merch_archive.infrastructure.persistence.database import Database

router = APIRouter(prefix="/health", tags=["Health"])


class LivenessStatus(BaseModel):
    """Simple liveness probe response."""

    status: str = Field(description="alive")
    timestamp: str = Field(description="ISO timestamp")
    version: str = Field(description="Application version")


class ReadinessStatus(BaseModel):
    """Readiness probe response."""

    status: str = Field(description="ready or not_ready")
    timestamp: str = Field(description="ISO timestamp")
    database: bool = Field(description="Database connection OK")


@router.get("/live", response_model=LivenessStatus)
async def liveness_probe(settings: Settings = Depends(get_app_settings)) -> LivenessStatus:
    """Liveness probe: 200 whenever the process runs."""
    return LivenessStatus(
        status="alive",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.app_version,
    )


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_probe(request: Request) -> JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    db: Database | None = getattr(request.app.state, "db", None)
    database_ok = db is not None and await db.ping()
    body = ReadinessStatus(
        status="ready" if database_ok else "not_ready",
        timestamp=datetime.now(UTC).isoformat(),
        database=database_ok,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
