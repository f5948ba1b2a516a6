"""
Agent registration API routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..services import RegistryService
from ..utils.dependencies import get_registry_service

registry_router = APIRouter()


@registry_router.post('/registry', status_code=201)
def register_agent(
    payload: Any = Body(...),
    registry: RegistryService = Depends(get_registry_service),
) -> Dict[str, str]:
    """
    Register or fully replace an agent.

    The body is validated by the registry service so every malformed payload
    is reported the same way, whatever its shape.

    Returns:
        Confirmation message and the stored agent id
    """
    agent_id = registry.register(payload)
    return {"message": "Agent registered successfully", "agentId": agent_id}
