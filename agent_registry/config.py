"""
Configuration constants and settings for the agent registry.
Centralizes all configuration values for easy maintenance.
"""
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

# Elasticsearch defaults
DEFAULT_ELASTICSEARCH_URL = "http://localhost:9200"
DEFAULT_ELASTICSEARCH_USERNAME = "elastic"
DEFAULT_ELASTICSEARCH_PASSWORD = "changeme"
DEFAULT_INDEX_NAME = "agents"
DEFAULT_STORE_REQUEST_TIMEOUT = 10.0  # Seconds per search engine request

# Agent card cache settings
AGENT_CARD_CACHE_TTL = 300  # 5 minutes
AGENT_CARD_CACHE_CHECK_PERIOD = 60  # Sweep expired cards every minute
AGENT_CARD_CACHE_MAX_KEYS = 0  # Unbounded; set a positive bound to evict oldest entries
AGENT_CARD_CACHE_KEY_PREFIX = "agentcard:"

# Card fetch settings
CARD_FETCH_TIMEOUT = 5.0  # Seconds
CARD_WELL_KNOWN_PATH = "/.well-known/agent.json"

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Server settings
DEFAULT_PORT = 3000
DEFAULT_HOST = "127.0.0.1"  # Secure default, use env var to override for containers


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_tuple(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.environ.get(name)
    if not raw:
        return default
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


@dataclass(frozen=True)
class RegistrySettings:
    """Runtime settings for one registry process."""

    elasticsearch_url: str = DEFAULT_ELASTICSEARCH_URL
    elasticsearch_username: Optional[str] = DEFAULT_ELASTICSEARCH_USERNAME
    elasticsearch_password: Optional[str] = DEFAULT_ELASTICSEARCH_PASSWORD
    elasticsearch_api_key: Optional[str] = None
    index_name: str = DEFAULT_INDEX_NAME
    store_request_timeout: float = DEFAULT_STORE_REQUEST_TIMEOUT

    cache_ttl: float = AGENT_CARD_CACHE_TTL
    cache_check_period: float = AGENT_CARD_CACHE_CHECK_PERIOD
    cache_max_keys: int = AGENT_CARD_CACHE_MAX_KEYS

    card_fetch_timeout: float = CARD_FETCH_TIMEOUT
    card_well_known_path: str = CARD_WELL_KNOWN_PATH

    cors_allowed_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def load_settings() -> RegistrySettings:
    """Build settings from the process environment."""
    return RegistrySettings(
        elasticsearch_url=_env_str("ELASTICSEARCH_URL", DEFAULT_ELASTICSEARCH_URL),
        elasticsearch_username=_env_str("ELASTICSEARCH_USERNAME", DEFAULT_ELASTICSEARCH_USERNAME),
        elasticsearch_password=_env_str("ELASTICSEARCH_PASSWORD", DEFAULT_ELASTICSEARCH_PASSWORD),
        elasticsearch_api_key=_env_str("ELASTICSEARCH_API_KEY"),
        index_name=_env_str("ELASTICSEARCH_INDEX", DEFAULT_INDEX_NAME),
        store_request_timeout=_env_float("ELASTICSEARCH_REQUEST_TIMEOUT", DEFAULT_STORE_REQUEST_TIMEOUT),
        cache_ttl=_env_float("CACHE_TTL", AGENT_CARD_CACHE_TTL),
        cache_check_period=_env_float("CACHE_CHECK_PERIOD", AGENT_CARD_CACHE_CHECK_PERIOD),
        cache_max_keys=max(0, _env_int("CACHE_MAX_KEYS", AGENT_CARD_CACHE_MAX_KEYS)),
        card_fetch_timeout=_env_float("CARD_FETCH_TIMEOUT", CARD_FETCH_TIMEOUT),
        card_well_known_path=_env_str("CARD_WELL_KNOWN_PATH", CARD_WELL_KNOWN_PATH),
        cors_allowed_origins=_env_tuple("CORS_ALLOWED_ORIGINS", ("*",)),
        host=_env_str("HOST", DEFAULT_HOST),
        port=_env_int("PORT", DEFAULT_PORT),
    )
