"""
Registry service: the discovery and lifecycle operations of the registry.

Orchestrates the document store, query compiler, card cache and card
fetcher. Route handlers call into this class and map its errors to HTTP
status codes; it has no knowledge of HTTP itself.
"""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Tuple

from ..config import MAX_PAGE_SIZE
from ..errors import InvalidInput
from ..models import AgentRecord, Pagination
from .card_cache import AgentCardCache
from .card_fetcher import CardFetcher
from .document_store import DocumentStore
from .query_compiler import compile_search, extract_distance
from .validation import parse_registration, parse_search_request

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistryService:
    """Agent registration, lookup, search and card retrieval."""

    def __init__(
        self,
        store: DocumentStore,
        cache: AgentCardCache,
        fetcher: CardFetcher,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the registry service.

        Args:
            store: Document store holding agent records
            cache: Card cache owned by this process
            fetcher: Client for agents' card endpoints
            clock: Source of ``updatedAt`` timestamps
        """
        self.store = store
        self.cache = cache
        self.fetcher = fetcher
        self._clock = clock
        # Concurrent misses for one agent share a single fetch, keyed by the
        # write generation the fetch started under
        self._in_flight: Dict[str, Tuple[int, asyncio.Future]] = {}
        # Bumped on every write so fetches started before it are not cached
        self._generations: Dict[str, int] = {}
        self._generation_lock = threading.Lock()

    def _generation(self, agent_id: str) -> int:
        with self._generation_lock:
            return self._generations.get(agent_id, 0)

    def _after_write(self, agent_id: str) -> None:
        # Bump and invalidate together so no fetch can cache in between
        with self._generation_lock:
            self._generations[agent_id] = self._generations.get(agent_id, 0) + 1
            self.cache.invalidate(agent_id)

    def register(self, data: Any) -> str:
        """
        Register or fully replace an agent.

        Args:
            data: Registration payload (mapping or AgentRegistration)

        Returns:
            The stored agent id

        Raises:
            InvalidInput: If the payload is malformed
            StoreUnavailable: If indexing fails
        """
        registration = parse_registration(data)
        record = AgentRecord.model_validate(
            {**registration.model_dump(), "updated_at": self._clock()}
        )

        agent_id = self.store.upsert(record)
        self._after_write(agent_id)

        logger.info(f"Registered agent: {agent_id}")
        return agent_id

    def get_metadata(self, agent_id: str) -> AgentRecord:
        """
        Fetch an agent's stored record.

        Raises:
            NotFound: If the id is unknown
            StoreUnavailable: If the store cannot be reached
        """
        return self.store.get(agent_id)

    def delete_agent(self, agent_id: str) -> None:
        """
        Delete an agent and drop its cached card.

        Raises:
            NotFound: If the id is unknown
            StoreUnavailable: If the store cannot be reached
        """
        self.store.delete(agent_id)
        self._after_write(agent_id)
        logger.info(f"Deleted agent: {agent_id}")

    def list_agents(self, page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        """
        List all agents, most recently updated first.

        Returns:
            ``{"agents": [...], "pagination": {...}}``
        """
        if page < 1:
            raise InvalidInput("page: must be greater than or equal to 1", field="page")
        if not 1 <= per_page <= MAX_PAGE_SIZE:
            raise InvalidInput(f"perPage: must be between 1 and {MAX_PAGE_SIZE}", field="perPage")

        result = self.store.list(page, per_page)
        return {
            "agents": [hit.record.to_response() for hit in result.hits],
            "pagination": Pagination.build(page, per_page, result.total).model_dump(by_alias=True),
        }

    def search(self, params: Any) -> Dict[str, Any]:
        """
        Search agents by text, filters and location.

        Args:
            params: SearchRequest or mapping of query parameters (``q``, ``tags``, ...)

        Returns:
            ``{"agents": [...], "pagination": {...}, "aggregations": {...}}``.
            Each agent carries ``score`` (null without text) and, when
            geo-sorted, ``distance`` in kilometers.

        Raises:
            InvalidInput: If a parameter is malformed
            StoreUnavailable: If the search fails
        """
        request = parse_search_request(params)
        compiled = compile_search(request)
        result = self.store.query(compiled)

        agents = []
        for hit in result.hits:
            item = hit.record.to_response()
            item["score"] = hit.score if request.text else None
            if compiled.geo_sorted:
                item["distance"] = extract_distance(hit.sort, geo_sorted=True)
            agents.append(item)

        return {
            "agents": agents,
            "pagination": Pagination.build(request.page, request.per_page, result.total).model_dump(by_alias=True),
            "aggregations": result.aggregations,
        }

    async def get_card(self, agent_id: str) -> Dict[str, Any]:
        """
        Return an agent's full card, from cache or fetched from the agent.

        Raises:
            NotFound: If the id is unknown
            CardUnavailable: If the agent's card endpoint fails; nothing is cached
            StoreUnavailable: If the store cannot be reached
        """
        card = self.cache.get(agent_id)
        if card is not None:
            return {**card, "cached": True}

        generation = self._generation(agent_id)
        entry = self._in_flight.get(agent_id)
        if entry is not None and entry[0] == generation:
            pending = entry[1]
        else:
            # No fetch yet, or the running one predates a write
            pending = asyncio.ensure_future(self._fetch_through(agent_id, generation))
            self._in_flight[agent_id] = (generation, pending)
            pending.add_done_callback(lambda done: self._release(agent_id, done))

        card = await asyncio.shield(pending)
        return dict(card)

    def _release(self, agent_id: str, future: asyncio.Future) -> None:
        entry = self._in_flight.get(agent_id)
        if entry is not None and entry[1] is future:
            del self._in_flight[agent_id]
        # Waiters may all have been cancelled; mark the outcome as observed
        if not future.cancelled():
            future.exception()

    async def _fetch_through(self, agent_id: str, generation: int) -> Dict[str, Any]:
        record = await asyncio.to_thread(self.store.get, agent_id)

        card = await self.fetcher.fetch(agent_id, record.url)

        with self._generation_lock:
            current = self._generations.get(agent_id, 0) == generation
            if current:
                self.cache.put(agent_id, card)
        if not current:
            logger.info(f"Agent {agent_id} changed during card fetch; result not cached")
        return card

    def cache_status(self) -> Dict[str, Any]:
        """Card cache counters."""
        return self.cache.stats().model_dump(by_alias=True)

    def cache_clear(self) -> None:
        """Empty the card cache and reset its counters."""
        self.cache.clear()

    def health(self) -> Dict[str, Any]:
        """
        Store and cache summary.

        Raises:
            StoreUnavailable: If the search cluster cannot be reached
        """
        cluster = self.store.health()
        stats = self.cache.stats()
        return {
            "status": "healthy",
            "timestamp": self._clock().isoformat(),
            "elasticsearch": cluster,
            "cache": {
                "size": stats.size,
                "hits": stats.hits,
                "misses": stats.misses,
                "hitRate": stats.hit_rate,
            },
        }

    async def aclose(self) -> None:
        """Release network resources held by the store and fetcher."""
        await self.fetcher.aclose()
        self.store.close()
