"""
Pydantic models for the agent registry.

This module provides all data validation models used across the application.
"""

from .agent import (
    AgentLocation,
    AgentRecord,
    AgentRegistration,
    AgentStatus,
    CamelModel,
    GeoPoint,
)
from .cache import CacheStats
from .search import Pagination, SearchRequest, SortMode

__all__ = [
    "AgentLocation",
    "AgentRecord",
    "AgentRegistration",
    "AgentStatus",
    "CamelModel",
    "GeoPoint",
    "CacheStats",
    "Pagination",
    "SearchRequest",
    "SortMode",
]
