"""
Card cache administration API routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services import RegistryService
from ..utils.dependencies import get_registry_service

cache_router = APIRouter()


@cache_router.get('/cache/status')
def cache_status(registry: RegistryService = Depends(get_registry_service)) -> Dict[str, Any]:
    """Card cache size and hit/miss counters."""
    return registry.cache_status()


@cache_router.post('/cache/clear')
def cache_clear(registry: RegistryService = Depends(get_registry_service)) -> Dict[str, str]:
    """Drop every cached card and reset the counters."""
    registry.cache_clear()
    return {"message": "Cache cleared successfully"}
