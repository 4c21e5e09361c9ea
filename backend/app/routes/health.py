"""
BaseDrop Backend — Health Check Route
=======================================

What:  Health check endpoint for monitoring and container probes.
How:   Verifies that both storage directories exist and are writable.

Status levels:
    - healthy:   image and base directories writable (HTTP 200)
    - unhealthy: either directory missing or read-only (HTTP 503)
"""

import logging
import os
import time
from pathlib import Path

from fastapi import APIRouter, Response

from app import __version__
from app.schemas.submission import HealthResponse
from app.services.file_service import file_service
from app.services.record_store import category_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _directory_status(path: Path) -> str:
    if path.is_dir() and os.access(path, os.W_OK):
        return "writable"
    logger.warning("Health check: %s is missing or not writable", path)
    return "unavailable"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    image_status = _directory_status(file_service.image_dir)
    base_status = _directory_status(category_store.base_dir)

    overall = "healthy"
    if image_status != "writable" or base_status != "writable":
        overall = "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        image_dir=image_status,
        base_dir=base_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
