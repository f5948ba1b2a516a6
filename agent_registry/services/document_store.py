"""
Elasticsearch document store for agent records.

This service handles all interactions with the search engine, providing a
typed abstraction for indexing, fetching, deleting and querying agents.
Writes force an index refresh so the next read from the same caller sees them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from ..common.secure_logging_utils import log_exception_safely
from ..config import RegistrySettings
from ..errors import NotFound, StoreUnavailable
from ..models import AgentRecord
from .query_compiler import CompiledQuery, compile_listing

logger = logging.getLogger(__name__)

T = TypeVar("T")

INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "agentId": {"type": "keyword"},
        "name": {
            "type": "text",
            "analyzer": "standard",
            "fields": {"keyword": {"type": "keyword"}},
        },
        "description": {"type": "text", "analyzer": "standard"},
        "url": {"type": "keyword"},
        "tags": {"type": "keyword"},
        "status": {"type": "keyword"},
        "version": {"type": "keyword"},
        "capabilities": {"type": "text", "analyzer": "standard"},
        "location": {
            "type": "object",
            "properties": {
                "coordinates": {"type": "geo_point"},
                "city": {"type": "keyword"},
                "country": {"type": "keyword"},
            },
        },
        "updatedAt": {"type": "date"},
    }
}


@dataclass
class StoreHit:
    """One matching document with its ranking data."""

    record: AgentRecord
    score: Optional[float] = None
    sort: List[Any] = field(default_factory=list)


@dataclass
class StoreResult:
    """Hits, total match count and facet counts of one query."""

    hits: List[StoreHit]
    total: int
    aggregations: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


def to_document(record: AgentRecord) -> Dict[str, Any]:
    """Serialize a record for indexing; the geo point becomes a [lon, lat] pair."""
    document = record.model_dump(by_alias=True, mode="json", exclude_none=True)
    location = document.get("location")
    if location and isinstance(location.get("coordinates"), dict):
        point = location["coordinates"]
        location["coordinates"] = [point["lon"], point["lat"]]
    return document


def from_document(source: Dict[str, Any]) -> AgentRecord:
    """Rebuild a record from an indexed document."""
    data = dict(source)
    location = data.get("location")
    if isinstance(location, dict):
        location = dict(location)
        coordinates = location.get("coordinates")
        if isinstance(coordinates, (list, tuple)) and len(coordinates) == 2:
            location["coordinates"] = {"lon": coordinates[0], "lat": coordinates[1]}
        data["location"] = location
    return AgentRecord.model_validate(data)


def _body(response: Any) -> Any:
    return getattr(response, "body", response)


def _normalize_aggregations(raw: Optional[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    facets: Dict[str, List[Dict[str, Any]]] = {}
    for name, aggregation in (raw or {}).items():
        buckets = aggregation.get("buckets", []) if isinstance(aggregation, dict) else []
        facets[name] = [{"key": bucket["key"], "count": bucket["doc_count"]} for bucket in buckets]
    return facets


class DocumentStore:
    """Service for agent document operations against Elasticsearch."""

    def __init__(self, client: Elasticsearch, index_name: str):
        """
        Initialize the document store.

        Args:
            client: Configured Elasticsearch client
            index_name: Index holding one document per agent
        """
        self.client = client
        self.index_name = index_name
        logger.info(f"DocumentStore initialized for index: {index_name}")

    @classmethod
    def from_settings(cls, settings: RegistrySettings) -> "DocumentStore":
        """Build a store with a client configured from settings."""
        client_kwargs: Dict[str, Any] = {
            "hosts": [settings.elasticsearch_url],
            "request_timeout": settings.store_request_timeout,
        }
        if settings.elasticsearch_api_key:
            client_kwargs["api_key"] = settings.elasticsearch_api_key
        elif settings.elasticsearch_username and settings.elasticsearch_password:
            client_kwargs["basic_auth"] = (settings.elasticsearch_username, settings.elasticsearch_password)

        return cls(Elasticsearch(**client_kwargs), settings.index_name)

    def _call(self, operation: str, func: Callable[[], T], agent_id: Optional[str] = None) -> T:
        try:
            return func()
        except NotFoundError as e:
            if agent_id is not None:
                raise NotFound(agent_id) from e
            log_exception_safely(logger, f"Index missing during {operation}", e, extra_context={"index": self.index_name})
            raise StoreUnavailable(f"Failed to {operation}", cause=e) from e
        except (ApiError, TransportError) as e:
            log_exception_safely(logger, f"Elasticsearch error during {operation}", e, extra_context={"index": self.index_name})
            raise StoreUnavailable(f"Failed to {operation}", cause=e) from e

    def ensure_index(self) -> bool:
        """
        Create the agents index with its mapping if it does not exist.

        Returns:
            True if the index was created, False if it already existed
        """
        def _ensure() -> bool:
            if self.client.indices.exists(index=self.index_name):
                return False
            self.client.indices.create(index=self.index_name, mappings=INDEX_MAPPINGS)
            return True

        created = self._call("initialize index", _ensure)
        if created:
            logger.info(f"Created index: {self.index_name}")
        return created

    def refresh(self) -> None:
        """Make every completed write visible to search."""
        self._call("refresh index", lambda: self.client.indices.refresh(index=self.index_name))

    def upsert(self, record: AgentRecord) -> str:
        """
        Index a record under its agent id, fully replacing any previous one.

        Returns:
            The stored agent id
        """
        document = to_document(record)
        self._call(
            "index agent",
            lambda: self.client.index(index=self.index_name, id=record.agent_id, document=document),
        )
        self.refresh()
        return record.agent_id

    def get(self, agent_id: str) -> AgentRecord:
        """
        Fetch one record by id.

        Raises:
            NotFound: If no document has this id
            StoreUnavailable: On transport or backend failure
        """
        response = self._call(
            "fetch agent",
            lambda: self.client.get(index=self.index_name, id=agent_id),
            agent_id=agent_id,
        )
        body = _body(response)
        if not body.get("found", True):
            raise NotFound(agent_id)
        return from_document(body["_source"])

    def delete(self, agent_id: str) -> None:
        """
        Delete one record by id.

        Raises:
            NotFound: If no document has this id
            StoreUnavailable: On transport or backend failure
        """
        self._call(
            "delete agent",
            lambda: self.client.delete(index=self.index_name, id=agent_id),
            agent_id=agent_id,
        )
        self.refresh()

    def query(self, compiled: CompiledQuery) -> StoreResult:
        """Run a compiled search and return typed hits, total and facets."""
        response = self._call(
            "search agents",
            lambda: self.client.search(index=self.index_name, **compiled.to_search_kwargs()),
        )
        body = _body(response)
        hits_block = body.get("hits", {})

        hits = [
            StoreHit(
                record=from_document(hit["_source"]),
                score=hit.get("_score"),
                sort=list(hit.get("sort") or []),
            )
            for hit in hits_block.get("hits", [])
        ]

        total = hits_block.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        return StoreResult(
            hits=hits,
            total=int(total),
            aggregations=_normalize_aggregations(body.get("aggregations")),
        )

    def list(self, page: int, per_page: int) -> StoreResult:
        """Unfiltered page of records, most recently updated first."""
        return self.query(compile_listing(page, per_page))

    def health(self) -> Dict[str, Any]:
        """
        Cluster health summary.

        Raises:
            StoreUnavailable: If the cluster cannot be reached
        """
        body = _body(self._call("check cluster health", self.client.cluster.health))
        return {
            "status": body.get("status"),
            "clusterName": body.get("cluster_name"),
            "numberOfNodes": body.get("number_of_nodes"),
        }

    def close(self) -> None:
        """Close the underlying client connections."""
        self.client.close()
