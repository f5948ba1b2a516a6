"""
Agent discovery API routes.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..services import RegistryService
from ..utils.dependencies import get_registry_service

search_router = APIRouter()


@search_router.get('/search')
def search_agents(
    q: Optional[str] = Query(None, description="Free text matched against name, description and capabilities"),
    tags: Optional[str] = Query(None, description="Comma separated tags"),
    status: Optional[str] = Query(None, description="active, inactive or maintenance"),
    version: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    lat: Optional[str] = Query(None, description="Latitude of the reference point"),
    lon: Optional[str] = Query(None, description="Longitude of the reference point"),
    page: Optional[str] = Query(None),
    per_page: Optional[str] = Query(None, alias="perPage"),
    sort: Optional[str] = Query(None, description="relevance, name, updatedAt or distance"),
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, Any]:
    """
    Search agents by text, filters and location.

    Parameters are passed through as strings; the registry service validates
    and coerces them.

    Returns:
        Matching agents, pagination metadata and tag/status facet counts
    """
    params = {
        "q": q,
        "tags": tags,
        "status": status,
        "version": version,
        "city": city,
        "country": country,
        "lat": lat,
        "lon": lon,
        "page": page,
        "perPage": per_page,
        "sort": sort,
    }
    return registry.search(params)
