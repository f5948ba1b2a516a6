"""
Agent listing, lookup and deletion API routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ..config import DEFAULT_PAGE_SIZE
from ..services import RegistryService
from ..utils.dependencies import get_registry_service

agents_router = APIRouter()


@agents_router.get('/agents')
def list_agents(
    page: int = Query(1, description="1-based page number"),
    per_page: int = Query(DEFAULT_PAGE_SIZE, alias="perPage", description="Agents per page"),
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, Any]:
    """
    List registered agents, most recently updated first.

    Returns:
        Agents and pagination metadata
    """
    return registry.list_agents(page, per_page)


@agents_router.get('/agent/{agent_id}')
def get_agent(
    agent_id: str,
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, Any]:
    """Stored metadata for one agent."""
    return registry.get_metadata(agent_id).to_response()


@agents_router.delete('/agent/{agent_id}')
def delete_agent(
    agent_id: str,
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, str]:
    """Delete an agent and invalidate its cached card."""
    registry.delete_agent(agent_id)
    return {"message": "Agent deleted successfully"}
