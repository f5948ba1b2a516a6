"""
Business logic services for the agent registry.

This module contains the registry logic separated from API endpoints:
query compilation, document storage, card caching and card fetching.
"""

from .card_cache import AgentCardCache
from .card_fetcher import CardFetcher
from .document_store import DocumentStore
from .registry_service import RegistryService

__all__ = [
    "AgentCardCache",
    "CardFetcher",
    "DocumentStore",
    "RegistryService",
]
