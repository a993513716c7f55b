"""Liveness and readiness endpoints."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from infrastructure.database.models import GroupModel
from infrastructure.database.session import get_async_session

logger = structlog.get_logger()

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None


def _report(status_text: str, database: str | None = None) -> HealthResponse:
    return HealthResponse(
        status=status_text,
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.app_env,
        database=database,
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    """Answer without touching the store."""
    return _report("healthy")


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Readiness check",
    responses={503: {"description": "Group store unreachable or not migrated"}},
)
async def detailed_health_check(
    response: Response,
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Verify the groups table can be queried."""
    try:
        await db.execute(select(func.count()).select_from(GroupModel))
    except SQLAlchemyError as e:
        logger.warning("readiness_check_failed", error_type=type(e).__name__)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return _report("degraded", f"unhealthy: {type(e).__name__}")

    return _report("healthy", "healthy")
