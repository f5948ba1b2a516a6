"""
Tests for the Elasticsearch document store with a mocked client.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError

from agent_registry.config import RegistrySettings
from agent_registry.errors import NotFound, StoreUnavailable
from agent_registry.models import AgentRecord, SearchRequest
from agent_registry.services import DocumentStore
from agent_registry.services.document_store import INDEX_MAPPINGS, from_document, to_document
from agent_registry.services.query_compiler import compile_search


def make_record(**overrides) -> AgentRecord:
    data = {
        "agentId": "weather-agent",
        "name": "Weather Agent",
        "description": "Provides weather forecasts",
        "url": "http://weather.example.com",
        "tags": ["weather"],
        "location": {"coordinates": {"lat": 48.85, "lon": 2.35}, "city": "Paris"},
        "updatedAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return AgentRecord.model_validate(data)


def not_found_error() -> NotFoundError:
    return NotFoundError("not_found", MagicMock(status=404), {"found": False})


@pytest.fixture
def mock_es_client():
    """Create a mock Elasticsearch client."""
    return MagicMock()


@pytest.fixture
def store(mock_es_client):
    return DocumentStore(mock_es_client, "agents")


class TestDocumentConversion:
    """Record <-> document conversion."""

    def test_geo_point_stored_as_lon_lat_pair(self):
        document = to_document(make_record())

        assert document["location"]["coordinates"] == [2.35, 48.85]
        assert document["agentId"] == "weather-agent"
        assert document["updatedAt"].startswith("2024-01-01T00:00:00")

    def test_round_trip_restores_lat_lon(self):
        record = from_document(to_document(make_record()))

        assert record.location.coordinates.lat == 48.85
        assert record.location.coordinates.lon == 2.35
        assert record.location.city == "Paris"

    def test_record_without_location(self):
        document = to_document(make_record(location=None))

        assert "location" not in document


class TestIndexLifecycle:

    def test_ensure_index_creates_missing_index(self, store, mock_es_client):
        mock_es_client.indices.exists.return_value = False

        assert store.ensure_index() is True

        mock_es_client.indices.create.assert_called_once_with(index="agents", mappings=INDEX_MAPPINGS)

    def test_ensure_index_keeps_existing_index(self, store, mock_es_client):
        mock_es_client.indices.exists.return_value = True

        assert store.ensure_index() is False

        mock_es_client.indices.create.assert_not_called()

    def test_mapping_field_types(self):
        properties = INDEX_MAPPINGS["properties"]

        assert properties["location"]["properties"]["coordinates"] == {"type": "geo_point"}
        assert properties["name"]["fields"]["keyword"] == {"type": "keyword"}
        assert properties["tags"]["type"] == "keyword"
        assert properties["updatedAt"]["type"] == "date"

    def test_from_settings_uses_api_key(self, monkeypatch):
        created = {}

        def fake_elasticsearch(**kwargs):
            created.update(kwargs)
            return MagicMock()

        monkeypatch.setattr("agent_registry.services.document_store.Elasticsearch", fake_elasticsearch)

        store = DocumentStore.from_settings(RegistrySettings(elasticsearch_api_key="secret-key", index_name="custom"))

        assert store.index_name == "custom"
        assert created["api_key"] == "secret-key"
        assert "basic_auth" not in created


class TestWrites:

    def test_upsert_indexes_and_refreshes(self, store, mock_es_client):
        agent_id = store.upsert(make_record())

        assert agent_id == "weather-agent"
        _, kwargs = mock_es_client.index.call_args
        assert kwargs["index"] == "agents"
        assert kwargs["id"] == "weather-agent"
        assert kwargs["document"]["location"]["coordinates"] == [2.35, 48.85]
        mock_es_client.indices.refresh.assert_called_once_with(index="agents")

    def test_delete_refreshes(self, store, mock_es_client):
        store.delete("weather-agent")

        mock_es_client.delete.assert_called_once_with(index="agents", id="weather-agent")
        mock_es_client.indices.refresh.assert_called_once()

    def test_delete_unknown_id(self, store, mock_es_client):
        mock_es_client.delete.side_effect = not_found_error()

        with pytest.raises(NotFound) as exc_info:
            store.delete("ghost")

        assert exc_info.value.agent_id == "ghost"
        mock_es_client.indices.refresh.assert_not_called()

    def test_transport_failure_is_store_unavailable(self, store, mock_es_client):
        mock_es_client.index.side_effect = ESConnectionError("connection refused")

        with pytest.raises(StoreUnavailable):
            store.upsert(make_record())


class TestReads:

    def test_get_returns_record(self, store, mock_es_client):
        mock_es_client.get.return_value = {"found": True, "_source": to_document(make_record())}

        record = store.get("weather-agent")

        assert record.agent_id == "weather-agent"
        assert record.location.coordinates.lat == 48.85

    def test_get_unknown_id(self, store, mock_es_client):
        mock_es_client.get.side_effect = not_found_error()

        with pytest.raises(NotFound):
            store.get("ghost")

    def test_query_parses_hits_total_and_facets(self, store, mock_es_client):
        mock_es_client.search.return_value = {
            "hits": {
                "total": {"value": 42, "relation": "eq"},
                "hits": [
                    {"_source": to_document(make_record()), "_score": 3.5, "sort": [1.2]},
                ],
            },
            "aggregations": {
                "tags": {"buckets": [{"key": "weather", "doc_count": 7}]},
                "status": {"buckets": [{"key": "active", "doc_count": 40}, {"key": "inactive", "doc_count": 2}]},
            },
        }
        compiled = compile_search(SearchRequest.model_validate({"q": "weather", "lat": 48, "lon": 2}))

        result = store.query(compiled)

        assert result.total == 42
        assert result.hits[0].record.agent_id == "weather-agent"
        assert result.hits[0].score == 3.5
        assert result.hits[0].sort == [1.2]
        assert result.aggregations == {
            "tags": [{"key": "weather", "count": 7}],
            "status": [{"key": "active", "count": 40}, {"key": "inactive", "count": 2}],
        }

        _, kwargs = mock_es_client.search.call_args
        assert kwargs["index"] == "agents"
        assert kwargs["query"] == compiled.query
        assert kwargs["sort"] == compiled.sort

    def test_list_uses_match_all(self, store, mock_es_client):
        mock_es_client.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}

        result = store.list(page=2, per_page=10)

        assert result.total == 0
        assert result.aggregations == {}
        _, kwargs = mock_es_client.search.call_args
        assert kwargs["query"] == {"match_all": {}}
        assert kwargs["from_"] == 10

    def test_search_failure_is_store_unavailable(self, store, mock_es_client):
        mock_es_client.search.side_effect = ESConnectionError("connection refused")

        with pytest.raises(StoreUnavailable):
            store.query(compile_search(SearchRequest()))

    def test_health_summary(self, store, mock_es_client):
        mock_es_client.cluster.health.return_value = {
            "status": "yellow",
            "cluster_name": "registry",
            "number_of_nodes": 3,
        }

        assert store.health() == {"status": "yellow", "clusterName": "registry", "numberOfNodes": 3}
