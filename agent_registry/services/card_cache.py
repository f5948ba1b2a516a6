"""
Agent card cache implementation.

TTL-based, invalidation-aware store mapping agent id -> fetched card, with
hit/miss accounting. One instance is created at process start and handed to
the registry service; nothing here is a module-level singleton.
"""
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..config import (
    AGENT_CARD_CACHE_CHECK_PERIOD,
    AGENT_CARD_CACHE_KEY_PREFIX,
    AGENT_CARD_CACHE_MAX_KEYS,
    AGENT_CARD_CACHE_TTL,
)
from ..models import CacheStats

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached card and the moment it stops being fresh."""

    card: Dict[str, Any]
    expires_at: float


class AgentCardCache:
    """
    TTL-based cache for agent cards.

    Entries expire ``ttl_seconds`` after insertion. A lookup that finds an
    expired entry drops it and counts a miss; the periodic sweep evicts
    expired entries nobody asked for. All operations hold one lock, so
    counters and the entry map are never observed half-updated.
    """

    def __init__(
        self,
        ttl_seconds: float = AGENT_CARD_CACHE_TTL,
        check_period: float = AGENT_CARD_CACHE_CHECK_PERIOD,
        max_keys: int = AGENT_CARD_CACHE_MAX_KEYS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl_seconds
        self.check_period = check_period
        self.max_keys = max_keys
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._lock = threading.RLock()
        self._sweeper: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @staticmethod
    def _key(agent_id: str) -> str:
        return f"{AGENT_CARD_CACHE_KEY_PREFIX}{agent_id}"

    def get(self, agent_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve the cached card for an agent.

        Args:
            agent_id: Agent whose card is requested

        Returns:
            The cached card if present and fresh, None otherwise
        """
        key = self._key(agent_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry.expires_at:
                self._hits += 1
                logger.debug(f"Card cache hit for {agent_id}")
                return entry.card

            if entry is not None:
                del self._entries[key]
            self._misses += 1
            logger.debug(f"Card cache miss for {agent_id}")
            return None

    def put(self, agent_id: str, card: Dict[str, Any]) -> None:
        """
        Store a card, replacing any previous one for the same agent.

        When the cache is bounded and full, the oldest entry is evicted.
        """
        key = self._key(agent_id)
        with self._lock:
            self._entries.pop(key, None)
            if self.max_keys and len(self._entries) >= self.max_keys:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.info(f"Card cache full ({self.max_keys} keys), evicted {evicted_key}")
            self._entries[key] = CacheEntry(card=card, expires_at=self._clock() + self.ttl)

    def invalidate(self, agent_id: str) -> bool:
        """
        Remove an agent's card, whether or not it has expired.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(self._key(agent_id), None) is not None

    def clear(self) -> None:
        """Drop every entry and reset hit/miss counters in one step."""
        with self._lock:
            cache_size = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.info(f"Cleared {cache_size} cached agent cards")

    def sweep(self) -> int:
        """
        Evict every expired entry.

        Returns:
            Number of entries evicted
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired agent cards")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            hits, misses, size = self._hits, self._misses, len(self._entries)

        lookups = hits + misses
        return CacheStats(
            size=size,
            hits=hits,
            misses=misses,
            hit_rate=hits / lookups if lookups else 0.0,
            ttl_seconds=self.ttl,
            max_keys=self.max_keys,
        )

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.check_period):
            try:
                self.sweep()
            except Exception as e:
                logger.warning(f"Card cache sweep failed: {e}")

    def start_sweeper(self) -> None:
        """Start the background sweep thread if it is not already running."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        if self.check_period <= 0:
            logger.info("Card cache sweep disabled (check period <= 0)")
            return

        self._stop_event.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop,
            name="agent-card-cache-sweeper",
            daemon=True,
        )
        self._sweeper.start()
        logger.info(f"Card cache sweeper started (every {self.check_period}s, ttl {self.ttl}s)")

    def stop_sweeper(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the background sweep thread."""
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout)
            self._sweeper = None
