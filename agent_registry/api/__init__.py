"""
API routes for the agent registry.

This module contains all FastAPI route definitions organized by feature area.
"""

from .health import health_router
from .registry import registry_router
from .agents import agents_router
from .search import search_router
from .cards import cards_router
from .cache import cache_router

__all__ = [
    "health_router",
    "registry_router",
    "agents_router",
    "search_router",
    "cards_router",
    "cache_router",
]
