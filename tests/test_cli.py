"""
Tests for the agent-registry command-line client.
"""

import json

import httpx
import pytest

from agent_registry.cli import AgentRegistryCLI, RegistryRequestError, async_main


def recording_client(responses):
    """AsyncClient whose transport answers from a {(method, path): Response} map."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        key = (request.method, request.url.path)
        if key in responses:
            return responses[key]
        return httpx.Response(404, json={"error": "Endpoint not found"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


class TestAgentRegistryCLI:

    async def test_search_drops_unset_parameters(self):
        client, requests = recording_client({("GET", "/search"): httpx.Response(200, json={"agents": []})})
        cli = AgentRegistryCLI("http://registry.test", client=client)

        await cli.search(q="weather", tags=None, lat=1.5)
        await cli.close()

        assert dict(requests[0].url.params) == {"q": "weather", "lat": "1.5"}

    async def test_error_response_raises(self):
        client, _ = recording_client({("GET", "/agent/ghost"): httpx.Response(404, json={"error": "Agent not found"})})
        cli = AgentRegistryCLI("http://registry.test", client=client)

        with pytest.raises(RegistryRequestError) as exc_info:
            await cli.get_agent("ghost")
        await cli.close()

        assert exc_info.value.status_code == 404
        assert "Agent not found" in exc_info.value.message


class TestMain:

    async def test_register_from_file(self, tmp_path, capsys):
        registration = {"agentId": "a1", "name": "A", "description": "d", "url": "http://a1.example.com"}
        path = tmp_path / "agent.json"
        path.write_text(json.dumps(registration))
        client, requests = recording_client({
            ("POST", "/registry"): httpx.Response(201, json={"message": "Agent registered successfully", "agentId": "a1"}),
        })

        exit_code = await async_main(["--url", "http://registry.test", "register", str(path)], client=client)

        assert exit_code == 0
        assert json.loads(requests[0].content) == registration
        assert json.loads(capsys.readouterr().out)["agentId"] == "a1"

    async def test_list_passes_paging(self):
        client, requests = recording_client({("GET", "/agents"): httpx.Response(200, json={"agents": []})})

        exit_code = await async_main(["list", "--page", "2", "--per-page", "5"], client=client)

        assert exit_code == 0
        assert dict(requests[0].url.params) == {"page": "2", "perPage": "5"}

    async def test_http_error_exits_non_zero(self, capsys):
        client, _ = recording_client({})

        exit_code = await async_main(["card", "ghost"], client=client)

        assert exit_code == 1
        assert "404" in capsys.readouterr().err

    async def test_connection_error_exits_non_zero(self, capsys):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        exit_code = await async_main(["health"], client=client)

        assert exit_code == 1
        assert "Connection error" in capsys.readouterr().err

    async def test_missing_registration_file(self, tmp_path):
        client, _ = recording_client({})

        exit_code = await async_main(["register", str(tmp_path / "missing.json")], client=client)

        assert exit_code == 1
