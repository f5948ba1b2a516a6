"""
Tests for registration and search input validation.
"""

import pytest

from agent_registry.errors import InvalidInput
from agent_registry.models import AgentStatus, SortMode
from agent_registry.services.validation import parse_registration, parse_search_request

from conftest import make_registration


class TestParseRegistration:
    """Registration payload validation."""

    def test_defaults_applied(self):
        registration = parse_registration({
            "agentId": "a1",
            "name": "Agent One",
            "description": "First agent",
            "url": "https://a1.example.com",
        })

        assert registration.tags == []
        assert registration.status == AgentStatus.ACTIVE
        assert registration.version == "1.0.0"
        assert registration.capabilities == ""
        assert registration.location is None

    def test_location_accepted(self):
        registration = parse_registration(make_registration(location={
            "coordinates": {"lat": 48.85, "lon": 2.35},
            "city": "Paris",
            "country": "FR",
        }))

        assert registration.location.coordinates.lat == 48.85
        assert registration.location.city == "Paris"

    @pytest.mark.parametrize("missing", ["agentId", "name", "description", "url"])
    def test_required_fields(self, missing):
        payload = make_registration()
        del payload[missing]

        with pytest.raises(InvalidInput) as exc_info:
            parse_registration(payload)
        assert missing in exc_info.value.message

    @pytest.mark.parametrize("url", ["not a url", "ftp://agent.example.com", "http://", "/relative/path"])
    def test_url_must_be_absolute_http(self, url):
        with pytest.raises(InvalidInput) as exc_info:
            parse_registration(make_registration(url=url))
        assert exc_info.value.field == "url"

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidInput):
            parse_registration(make_registration(status="retired"))

    def test_unknown_fields_rejected(self):
        with pytest.raises(InvalidInput):
            parse_registration(make_registration(owner="someone"))

    def test_empty_tag_rejected(self):
        with pytest.raises(InvalidInput):
            parse_registration(make_registration(tags=["weather", ""]))

    @pytest.mark.parametrize("coordinates", [{"lat": 91, "lon": 0}, {"lat": 0, "lon": -181}])
    def test_coordinates_out_of_range(self, coordinates):
        with pytest.raises(InvalidInput) as exc_info:
            parse_registration(make_registration(location={"coordinates": coordinates}))
        assert exc_info.value.field.startswith("location.coordinates")

    def test_body_must_be_an_object(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_registration(["not", "an", "object"])
        assert exc_info.value.message == "Request body must be a JSON object"


class TestParseSearchRequest:
    """Search parameter validation."""

    def test_query_string_values_are_coerced(self):
        request = parse_search_request({"q": "weather", "lat": "48.85", "lon": "2.35", "page": "2", "perPage": "50"})

        assert request.text == "weather"
        assert request.lat == 48.85
        assert request.page == 2
        assert request.per_page == 50

    def test_none_values_are_absent(self):
        request = parse_search_request({"q": None, "tags": None, "page": None})

        assert request.text is None
        assert request.page == 1
        assert request.sort == SortMode.RELEVANCE

    @pytest.mark.parametrize("params", [
        {"lat": "91"},
        {"lon": "-200"},
        {"lat": "north"},
        {"page": "0"},
        {"perPage": "0"},
        {"perPage": "101"},
        {"sort": "popularity"},
        {"status": "retired"},
    ])
    def test_out_of_range_rejected(self, params):
        with pytest.raises(InvalidInput):
            parse_search_request(params)

    def test_max_page_size_accepted(self):
        assert parse_search_request({"perPage": "100"}).per_page == 100
