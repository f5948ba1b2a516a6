"""
Fetches live agent cards from the agents' own well-known endpoint.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from ..common.secure_logging_utils import sanitize_for_logging
from ..config import CARD_FETCH_TIMEOUT, CARD_WELL_KNOWN_PATH
from ..errors import CardUnavailable

logger = logging.getLogger(__name__)


class CardFetcher:
    """Bounded-timeout client for ``<agent url>/.well-known/agent.json``."""

    def __init__(
        self,
        timeout: float = CARD_FETCH_TIMEOUT,
        well_known_path: str = CARD_WELL_KNOWN_PATH,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Seconds allowed for the whole request
            well_known_path: Card path appended to each agent's base URL
            client: Shared async client; one is created on first use if omitted
        """
        self.timeout = timeout
        self.well_known_path = "/" + well_known_path.lstrip("/")
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
                follow_redirects=True,
            )
        return self._client

    def card_url(self, base_url: str) -> str:
        """Absolute card URL for an agent base URL."""
        return f"{base_url.rstrip('/')}{self.well_known_path}"

    async def fetch(self, agent_id: str, base_url: str) -> Dict[str, Any]:
        """
        Fetch and stamp an agent's card.

        Args:
            agent_id: Registry id of the agent
            base_url: The agent's registered base URL

        Returns:
            Card payload plus ``agentId``, ``cached=False`` and ``fetchTimestamp``

        Raises:
            CardUnavailable: On timeout, connection error, non-2xx status or a
                payload that is not a JSON object
        """
        card_url = self.card_url(base_url)
        client = self._get_client()

        try:
            response = await client.get(card_url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching agent card for {agent_id} from {sanitize_for_logging(card_url)}")
            raise CardUnavailable(agent_id, base_url, "timeout") from e
        except httpx.RequestError as e:
            logger.warning(f"Failed to connect to agent {agent_id} at {sanitize_for_logging(card_url)}: {type(e).__name__}")
            raise CardUnavailable(agent_id, base_url, f"connection error: {type(e).__name__}") from e

        if not response.is_success:
            logger.warning(f"Agent card endpoint for {agent_id} returned {response.status_code}")
            raise CardUnavailable(agent_id, base_url, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Agent card for {agent_id} is not valid JSON")
            raise CardUnavailable(agent_id, base_url, "invalid JSON payload") from e

        if not isinstance(payload, dict):
            raise CardUnavailable(agent_id, base_url, "card payload is not a JSON object")

        return {
            **payload,
            "agentId": agent_id,
            "cached": False,
            "fetchTimestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
