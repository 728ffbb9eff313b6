"""
Prolink AI - Health Check Route
=================================

What:  GET /api/ai/health for probes and monitoring.
How:   Runs SELECT 1 against the database and the completion provider's
       cheap health_check() (model listing, no tokens).

Status levels:
    healthy    database and provider reachable
    degraded   database reachable, provider not
    unhealthy  database unreachable
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from prolink_ai import __version__
from prolink_ai.database import engine
from prolink_ai.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    provider_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    gateway = request.app.state.ai_service.gateway
    try:
        if not await gateway.completion_provider.health_check():
            provider_status = "unavailable"
    except Exception as e:
        provider_status = "unavailable"
        logger.warning("Health check: %s unreachable: %s", gateway.completion_provider_name, str(e))

    if provider_status != "available" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        completion_provider=gateway.completion_provider_name,
        provider_status=provider_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
