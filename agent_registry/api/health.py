"""
Health check API routes.

This module provides health monitoring endpoints for load balancers and monitoring systems.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..errors import StoreUnavailable
from ..services import RegistryService
from ..utils.dependencies import get_registry_service

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get('/health')
def health_check(registry: RegistryService = Depends(get_registry_service)):
    """
    Health check endpoint for the load balancer.

    Returns:
        Cluster and cache summary, or 503 when the search cluster is unreachable
    """
    try:
        return registry.health()
    except StoreUnavailable as e:
        logger.warning(f"Health check failed: {e.message}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "error": e.message,
            },
        )
