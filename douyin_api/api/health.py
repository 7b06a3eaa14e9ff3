"""Health check endpoints.

- ``/health``: component checks (cache directory, TikHub credentials)
- ``/liveness``: process is alive
- ``/readiness``: service can accept traffic
"""

import os
import time
from datetime import datetime, timezone
from typing import Dict, Literal

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from douyin_api import __version__
from douyin_api.api.schemas import (
    ComponentHealth,
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])

# Track application start time for uptime calculation
_start_time: float = time.time()


def reset_start_time() -> None:
    """Reset the start time (for testing)."""
    global _start_time
    _start_time = time.time()


def _check_cache() -> ComponentHealth:
    """Check that the cache directory exists and is writable."""
    try:
        from douyin_api.main import get_cache_store

        cache = get_cache_store()
    except RuntimeError:
        return ComponentHealth(
            status="unhealthy",
            details={"error": "Cache store not configured"},
        )

    cache_dir = cache.cache_dir
    if not cache_dir.is_dir() or not os.access(cache_dir, os.W_OK):
        return ComponentHealth(
            status="unhealthy",
            details={"error": "Cache directory not writable", "cache_dir": str(cache_dir)},
        )

    return ComponentHealth(
        status="healthy",
        details={"cache_dir": str(cache_dir), "ttl": cache.ttl},
    )


def _check_tikhub() -> ComponentHealth:
    """Check that TikHub credentials are configured."""
    try:
        from douyin_api.main import get_config

        config = get_config()
    except RuntimeError:
        return ComponentHealth(
            status="unhealthy",
            details={"error": "Configuration not loaded"},
        )

    if config.testing.test_mode:
        return ComponentHealth(status="healthy", details={"mode": "test"})

    if not config.tikhub.api_key:
        return ComponentHealth(
            status="unhealthy",
            details={"error": "TikHub API key not configured"},
        )

    return ComponentHealth(status="healthy", details={"base_url": config.tikhub.base_url})


def _is_test_mode() -> bool:
    try:
        from douyin_api.main import get_config

        return get_config().testing.test_mode
    except RuntimeError:
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All components healthy"},
        503: {"description": "One or more components unhealthy"},
    },
)
async def health_check() -> JSONResponse:
    """
    Detailed health check endpoint.

    Returns HTTP 200 if all components are healthy,
    HTTP 503 if any component is unhealthy.
    """
    components: Dict[str, ComponentHealth] = {
        "cache": _check_cache(),
        "tikhub": _check_tikhub(),
    }

    all_healthy = all(c.status == "healthy" for c in components.values())
    overall_status: Literal["healthy", "unhealthy"] = "healthy" if all_healthy else "unhealthy"

    response = HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        test_mode=_is_test_mode(),
        components=components,
    )

    status_code = status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    logger.info(
        "health_check_completed",
        status=overall_status,
        components={k: v.status for k, v in components.items()},
    )

    return JSONResponse(content=response.model_dump(), status_code=status_code)


@router.get("/liveness", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """Liveness probe endpoint."""
    return LivenessResponse(status="alive")


@router.get(
    "/readiness",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready to accept traffic"},
        503: {"description": "Service is not ready"},
    },
)
async def readiness_check() -> JSONResponse:
    """
    Readiness probe endpoint.

    Ready when the cache directory is writable and TikHub credentials exist.
    """
    issues = []

    if _check_cache().status != "healthy":
        issues.append("Cache directory not writable")

    if _check_tikhub().status != "healthy":
        issues.append("TikHub API key not configured")

    if issues:
        response = ReadinessResponse(status="not_ready", ready=False, message="; ".join(issues))
        return JSONResponse(
            content=response.model_dump(),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return JSONResponse(
        content=ReadinessResponse(status="ready", ready=True).model_dump(),
        status_code=status.HTTP_200_OK,
    )
