"""
Registrar Backend: Health Check Route
======================================

What:  Liveness/readiness check for Docker health checks and load balancers.
How:   Asks the active DocumentStore to ping its backend.

Status levels:
    healthy:   store reachable (HTTP 200)
    unhealthy: store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response, status

from registrar import __version__
from registrar.config import settings
from registrar.schemas.common import HealthResponse
from registrar.store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: DocumentStore = Depends(get_document_store),
) -> HealthResponse:
    """
    Ping the document store with the cheapest round trip it supports
    (SELECT 1 for SQL, a no-op for memory).
    """
    reachable = await store.ping()
    if not reachable:
        logger.warning("Health check: %s store unreachable", settings.store_backend)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store_backend=settings.store_backend,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
