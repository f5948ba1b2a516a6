#!/usr/bin/env python3
"""
Agent Registry CLI Tool

A command-line utility to interact with a running Agent Registry:
register and delete agents, search, fetch cards and manage the card cache.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

DEFAULT_REGISTRY_URL = "http://localhost:3000"


class RegistryRequestError(Exception):
    """Raised when the registry cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AgentRegistryCLI:
    """Command-line interface for the Agent Registry."""

    def __init__(self, base_url: str = DEFAULT_REGISTRY_URL, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip('/')
        self.client = client or httpx.AsyncClient(timeout=30.0)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.RequestError as e:
            raise RegistryRequestError(f"Connection error: {type(e).__name__}: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {"error": response.text}

        if response.is_error:
            error = payload.get("error") if isinstance(payload, dict) else None
            raise RegistryRequestError(
                f"HTTP error {response.status_code}: {error or response.text}",
                status_code=response.status_code,
            )
        return payload

    async def health(self) -> dict:
        """Get registry health."""
        return await self._request("GET", "/health")

    async def list_agents(self, page: int = 1, per_page: int = 20) -> dict:
        """List registered agents."""
        return await self._request("GET", "/agents", params={"page": page, "perPage": per_page})

    async def get_agent(self, agent_id: str) -> dict:
        """Get one agent's stored metadata."""
        return await self._request("GET", f"/agent/{agent_id}")

    async def get_card(self, agent_id: str) -> dict:
        """Get one agent's full card."""
        return await self._request("GET", f"/agentcard/{agent_id}")

    async def search(self, **params) -> dict:
        """Search agents; None-valued parameters are omitted."""
        query = {key: value for key, value in params.items() if value is not None}
        return await self._request("GET", "/search", params=query)

    async def register(self, registration: Dict[str, Any]) -> dict:
        """Register or replace an agent."""
        return await self._request("POST", "/registry", json=registration)

    async def delete_agent(self, agent_id: str) -> dict:
        """Delete an agent."""
        return await self._request("DELETE", f"/agent/{agent_id}")

    async def cache_status(self) -> dict:
        """Get card cache counters."""
        return await self._request("GET", "/cache/status")

    async def cache_clear(self) -> dict:
        """Clear the card cache."""
        return await self._request("POST", "/cache/clear")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-registry",
        description="Agent Registry CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s health                          # Cluster and cache health
  %(prog)s list --per-page 50              # List agents
  %(prog)s search --q weather --lat 48.8 --lon 2.3
  %(prog)s register agent.json             # Register from a JSON file
  %(prog)s card weather-agent              # Fetch an agent card
  %(prog)s --url http://localhost:3000 cache-status
        """
    )

    parser.add_argument(
        '--url',
        default=DEFAULT_REGISTRY_URL,
        help=f'Base URL of the registry (default: {DEFAULT_REGISTRY_URL})'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('health', help='Show registry health')

    list_parser = subparsers.add_parser('list', help='List agents')
    list_parser.add_argument('--page', type=int, default=1)
    list_parser.add_argument('--per-page', type=int, default=20)

    get_parser = subparsers.add_parser('get', help='Show stored agent metadata')
    get_parser.add_argument('agent_id')

    card_parser = subparsers.add_parser('card', help='Fetch an agent card')
    card_parser.add_argument('agent_id')

    search_parser = subparsers.add_parser('search', help='Search agents')
    search_parser.add_argument('--q', help='Free text query')
    search_parser.add_argument('--tags', help='Comma separated tags')
    search_parser.add_argument('--status', choices=['active', 'inactive', 'maintenance'])
    search_parser.add_argument('--version')
    search_parser.add_argument('--city')
    search_parser.add_argument('--country')
    search_parser.add_argument('--lat', type=float)
    search_parser.add_argument('--lon', type=float)
    search_parser.add_argument('--sort', choices=['relevance', 'name', 'updatedAt', 'distance'])
    search_parser.add_argument('--page', type=int)
    search_parser.add_argument('--per-page', type=int)

    register_parser = subparsers.add_parser('register', help='Register an agent from a JSON file')
    register_parser.add_argument('json_file', type=Path)

    delete_parser = subparsers.add_parser('delete', help='Delete an agent')
    delete_parser.add_argument('agent_id')

    subparsers.add_parser('cache-status', help='Show card cache counters')
    subparsers.add_parser('cache-clear', help='Clear the card cache')

    return parser


async def run_command(cli: AgentRegistryCLI, args: argparse.Namespace) -> Any:
    """Dispatch one parsed command and return the registry's JSON answer."""
    if args.command == 'health':
        return await cli.health()
    if args.command == 'list':
        return await cli.list_agents(page=args.page, per_page=args.per_page)
    if args.command == 'get':
        return await cli.get_agent(args.agent_id)
    if args.command == 'card':
        return await cli.get_card(args.agent_id)
    if args.command == 'search':
        return await cli.search(
            q=args.q,
            tags=args.tags,
            status=args.status,
            version=args.version,
            city=args.city,
            country=args.country,
            lat=args.lat,
            lon=args.lon,
            sort=args.sort,
            page=args.page,
            perPage=args.per_page,
        )
    if args.command == 'register':
        registration = json.loads(args.json_file.read_text(encoding="utf-8"))
        return await cli.register(registration)
    if args.command == 'delete':
        return await cli.delete_agent(args.agent_id)
    if args.command == 'cache-status':
        return await cli.cache_status()
    if args.command == 'cache-clear':
        return await cli.cache_clear()
    raise ValueError(f"Unknown command: {args.command}")


async def async_main(argv: Optional[List[str]] = None, client: Optional[httpx.AsyncClient] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    cli = AgentRegistryCLI(base_url=args.url, client=client)

    try:
        result = await run_command(cli, args)
        print(json.dumps(result, indent=2))
        return 0
    except RegistryRequestError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Could not read registration file: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n⏹️  Operation cancelled by user.", file=sys.stderr)
        return 1
    finally:
        await cli.close()


def main() -> None:
    sys.exit(asyncio.run(async_main()))


if __name__ == '__main__':
    main()
