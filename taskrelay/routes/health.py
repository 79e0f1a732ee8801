"""
TaskRelay Backend — Health Check Routes
========================================

What:  Liveness and configuration status for monitoring and load balancer probes.
Why:   A relay missing its Todoist token still answers HTTP but cannot serve
       its main route; the health check says so instead of waiting for a 500.
How:   Reports configuration only. Upstreams are not called, so probes don't
       spend third-party quota.

Status levels:
    - healthy:   every integration has its credentials (HTTP 200)
    - degraded:  some integration is unconfigured (HTTP 200, flag for monitoring)

Neither route requires the internal secret.
"""

import logging
import time

from fastapi import APIRouter, Depends

from taskrelay import __version__
from taskrelay.config import Settings
from taskrelay.dependencies import get_app_settings
from taskrelay.schemas.common import HealthResponse, PingResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    missing = settings.missing_credentials()
    return HealthResponse(
        status="degraded" if missing else "healthy",
        version=__version__,
        missing_configuration=missing,
        access_control=bool(settings.internal_api_secret),
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/ping", response_model=PingResponse, summary="Liveness ping")
async def ping() -> PingResponse:
    logger.info("Received a ping request")
    return PingResponse(message="Hello from the TaskRelay server!")
