"""
Dependency injection setup for FastAPI.

This module provides dependency injection functions for services,
following the dependency inversion principle for better testability.
"""

from functools import lru_cache

from ..config import RegistrySettings, load_settings
from ..services import AgentCardCache, CardFetcher, DocumentStore, RegistryService


@lru_cache()
def get_settings() -> RegistrySettings:
    """
    Get registry settings from environment variables.

    Returns:
        Settings for this process
    """
    return load_settings()


@lru_cache()
def get_document_store() -> DocumentStore:
    """
    Get document store instance.

    Returns:
        Document store bound to the configured cluster and index
    """
    return DocumentStore.from_settings(get_settings())


@lru_cache()
def get_card_cache() -> AgentCardCache:
    """
    Get the process-wide agent card cache.

    Returns:
        Card cache configured from settings
    """
    settings = get_settings()
    return AgentCardCache(
        ttl_seconds=settings.cache_ttl,
        check_period=settings.cache_check_period,
        max_keys=settings.cache_max_keys,
    )


@lru_cache()
def get_card_fetcher() -> CardFetcher:
    """
    Get card fetcher instance.

    Returns:
        Card fetcher configured from settings
    """
    settings = get_settings()
    return CardFetcher(
        timeout=settings.card_fetch_timeout,
        well_known_path=settings.card_well_known_path,
    )


@lru_cache()
def get_registry_service() -> RegistryService:
    """
    Get Registry service instance.

    Returns:
        Registry service wired to the store, cache and fetcher
    """
    return RegistryService(
        store=get_document_store(),
        cache=get_card_cache(),
        fetcher=get_card_fetcher(),
    )
