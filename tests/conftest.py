"""
Shared fixtures and test doubles for the agent registry tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from agent_registry.errors import CardUnavailable, NotFound, StoreUnavailable
from agent_registry.models import AgentRecord
from agent_registry.services import AgentCardCache, RegistryService
from agent_registry.services.document_store import StoreHit, StoreResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDocumentStore:
    """In-memory stand-in for DocumentStore."""

    def __init__(self):
        self.records: Dict[str, AgentRecord] = {}
        self.compiled_queries: List[Any] = []
        self.next_result: Optional[StoreResult] = None
        self.unavailable = False
        self.index_ensured = False
        self.closed = False

    def _check(self):
        if self.unavailable:
            raise StoreUnavailable("Failed to reach search cluster")

    def ensure_index(self) -> bool:
        self._check()
        self.index_ensured = True
        return True

    def upsert(self, record: AgentRecord) -> str:
        self._check()
        self.records[record.agent_id] = record
        return record.agent_id

    def get(self, agent_id: str) -> AgentRecord:
        self._check()
        if agent_id not in self.records:
            raise NotFound(agent_id)
        return self.records[agent_id]

    def delete(self, agent_id: str) -> None:
        self._check()
        if agent_id not in self.records:
            raise NotFound(agent_id)
        del self.records[agent_id]

    def query(self, compiled) -> StoreResult:
        self._check()
        self.compiled_queries.append(compiled)
        if self.next_result is not None:
            return self.next_result
        hits = [StoreHit(record=record, score=1.0) for record in self.records.values()]
        return StoreResult(hits=hits, total=len(hits), aggregations={"tags": [], "status": []})

    def list(self, page: int, per_page: int) -> StoreResult:
        self._check()
        records = sorted(self.records.values(), key=lambda r: r.updated_at, reverse=True)
        start = (page - 1) * per_page
        hits = [StoreHit(record=record) for record in records[start:start + per_page]]
        return StoreResult(hits=hits, total=len(records))

    def health(self) -> Dict[str, Any]:
        self._check()
        return {"status": "green", "clusterName": "test-cluster", "numberOfNodes": 1}

    def close(self) -> None:
        self.closed = True


class FakeCardFetcher:
    """Card fetcher double that serves canned cards and counts calls."""

    def __init__(self):
        self.cards: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, str] = {}
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def fetch(self, agent_id: str, base_url: str) -> Dict[str, Any]:
        self.calls.append(agent_id)
        if self.gate is not None:
            await self.gate.wait()
        if agent_id in self.failures:
            raise CardUnavailable(agent_id, base_url, self.failures[agent_id])
        card = self.cards.get(agent_id, {"name": agent_id, "url": base_url})
        return {
            **card,
            "agentId": agent_id,
            "cached": False,
            "fetchTimestamp": "2024-01-01T00:00:00+00:00",
        }

    async def aclose(self) -> None:
        self.closed = True


class StepClock:
    """UTC wall clock that advances one second per call."""

    def __init__(self):
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def make_registration(agent_id: str = "weather-agent", **overrides) -> Dict[str, Any]:
    """Valid registration payload with camelCase keys."""
    payload = {
        "agentId": agent_id,
        "name": "Weather Agent",
        "description": "Provides weather forecasts",
        "url": f"http://{agent_id}.example.com",
        "tags": ["weather", "forecast"],
        "capabilities": "forecasting, alerts",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_store():
    return FakeDocumentStore()


@pytest.fixture
def fake_fetcher():
    return FakeCardFetcher()


@pytest.fixture
def card_cache(fake_clock):
    return AgentCardCache(ttl_seconds=300, check_period=0, max_keys=0, clock=fake_clock)


@pytest.fixture
def registry(fake_store, card_cache, fake_fetcher):
    return RegistryService(store=fake_store, cache=card_cache, fetcher=fake_fetcher, clock=StepClock())
