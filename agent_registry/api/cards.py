"""
Agent card API routes.

Cards are served from the registry's cache or fetched through from the
agent's own well-known endpoint.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services import RegistryService
from ..utils.dependencies import get_registry_service

cards_router = APIRouter()


@cards_router.get('/agentcard/{agent_id}')
async def get_agent_card(
    agent_id: str,
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, Any]:
    """
    Fetch an agent's full card.

    Returns:
        The card with ``cached`` set to whether it came from the cache

    Raises:
        NotFound: Agent id unknown (404)
        CardUnavailable: Agent origin unreachable (503)
    """
    return await registry.get_card(agent_id)
