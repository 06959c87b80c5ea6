"""Health check endpoints."""

import os
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from infrastructure.database.session import get_async_session

APP_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    uploads: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """Liveness probe. Does not touch the database or the upload directory."""
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Readiness probe covering the database and the photo store."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {type(e).__name__}"

    uploads_ok = os.path.isdir(settings.upload_dir) and os.access(settings.upload_dir, os.W_OK)
    uploads_status = "healthy" if uploads_ok else "unhealthy: upload directory not writable"

    healthy = db_status == "healthy" and uploads_ok
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=APP_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
        database=db_status,
        uploads=uploads_status,
    )
