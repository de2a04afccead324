"""
GAD Backend — Health Check Route
=================================

What:  GET /health for container probes and uptime monitors.
How:   One `SELECT 1` round trip on the shared engine decides the status.

Status levels:
    - healthy:   the database answered
    - unhealthy: the database did not; the endpoint itself still answers 200
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gad import __version__
from gad import database
from gad.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


async def database_reachable() -> bool:
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database probe failed: %s", e)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Service status, version, database connectivity and uptime in seconds.",
)
async def health_check() -> HealthResponse:
    connected = await database_reachable()
    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
