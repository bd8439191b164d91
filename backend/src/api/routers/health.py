"""Health check endpoints."""
import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    cache: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Check application, database, and cache health.

    An unreachable cache only degrades the service; an unreachable database
    makes it unhealthy.
    """
    db_status = "healthy"
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    cache_status = "healthy" if await request.app.state.redis_client.ping() else "unavailable"

    if db_status != "healthy":
        overall = "unhealthy"
    elif cache_status != "healthy":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(status=overall, database=db_status, cache=cache_status)
