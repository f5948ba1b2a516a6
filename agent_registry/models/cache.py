"""Agent card cache statistics model."""

from pydantic import Field

from .agent import CamelModel


class CacheStats(CamelModel):
    """Snapshot of the card cache counters."""

    size: int = Field(..., description="Number of cached cards")
    hits: int = Field(..., description="Lookups served from cache since the last clear")
    misses: int = Field(..., description="Lookups that were absent or expired since the last clear")
    hit_rate: float = Field(..., description="hits / (hits + misses), 0 when no lookups")
    ttl_seconds: float = Field(..., description="Time-to-live applied to new entries")
    max_keys: int = Field(..., description="Entry bound, 0 when unbounded")
