"""
NotesWise Backend: Health Check Route
=======================================

What:  Liveness endpoint for container health checks and load balancer probes.
Why:   Orchestrators need a cheap signal that the process is up and wired.
How:   Reports version, uptime, the default provider and the enabled provider
       names. It does NOT call any provider.

Liveness vs. provider health:
    Probing providers costs a real (billable) generation per provider, which
    is wrong for a check that runs every few seconds. Provider reachability is
    reported on demand by GET /api/ai/health instead. A provider can be enabled
    here and still unhealthy there; the two signals are independent.
"""

import logging
import time

from fastapi import APIRouter, Depends

from app import __version__
from app.routes.ai import get_ai_service
from app.schemas.note import HealthResponse
from app.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check(ai_service: AIService = Depends(get_ai_service)) -> HealthResponse:
    providers = ai_service.list_available_providers()
    return HealthResponse(
        status="healthy" if providers else "degraded",
        version=__version__,
        default_provider=ai_service.factory.default_provider,
        providers=providers,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
