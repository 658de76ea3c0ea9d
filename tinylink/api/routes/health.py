"""Health check endpoints for monitoring application status."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.api import schemas
from tinylink.core.config import settings
from tinylink.db.base import DatabaseHealthCheck
from tinylink.db.session import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/healthz",
    response_model=schemas.HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def healthz():
    """Simple check that the application is running."""
    return {"ok": True, "version": settings.APP_VERSION}


@router.get(
    "/healthz/ready",
    summary="Readiness probe",
    response_description="Application readiness including the database",
)
async def readiness_probe(db: AsyncSession = Depends(get_db)):
    """Check if the application can serve requests that need the database."""
    database = await DatabaseHealthCheck.check_connection(db)
    ready = database["status"] == "healthy"

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "ok": ready,
            "version": settings.APP_VERSION,
            "database": database,
        },
    )
