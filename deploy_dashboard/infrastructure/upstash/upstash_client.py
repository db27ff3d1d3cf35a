"""Upstash Redis REST client."""
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from deploy_dashboard.domain.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

Command = Sequence[Any]


class UpstashClient:
    """Sends Redis commands as JSON arrays to the Upstash REST endpoint."""

    backend_name = "redis"

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the HTTP client."""
        self._url = url.rstrip("/")
        self._token = token
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def _make_request(self, url: str, body: Any) -> Any:
        """POST a command payload and decode the JSON reply."""
        try:
            response = await self.client.post(url, json=body, headers=self._get_headers())
        except httpx.HTTPError as e:
            logger.error(f"Upstash request failed: {e}")
            raise BackendUnavailableError(self.backend_name, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendUnavailableError(
                self.backend_name, f"unreadable response (HTTP {response.status_code})"
            ) from e

        if isinstance(payload, dict) and payload.get("error"):
            raise BackendUnavailableError(self.backend_name, str(payload["error"]))
        if response.status_code >= 400:
            raise BackendUnavailableError(self.backend_name, f"HTTP {response.status_code}")
        return payload

    async def execute(self, *command: Any) -> Any:
        """Run a single command and return its result."""
        payload = await self._make_request(self._url, [_encode(arg) for arg in command])
        return payload.get("result") if isinstance(payload, dict) else None

    async def pipeline(self, commands: List[Command]) -> List[Any]:
        """Run several commands in one round trip. The batch is not transactional.

        Raises on the first command that reported an error; earlier commands stay applied.
        """
        payload = await self._make_request(
            f"{self._url}/pipeline", [[_encode(arg) for arg in command] for command in commands]
        )
        if not isinstance(payload, list):
            raise BackendUnavailableError(self.backend_name, "unexpected pipeline response")

        results = []
        for command, item in zip(commands, payload):
            if isinstance(item, dict) and item.get("error"):
                raise BackendUnavailableError(self.backend_name, f"{command[0]} failed: {item['error']}")
            results.append(item.get("result") if isinstance(item, dict) else None)
        return results

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()


def _encode(arg: Any) -> Any:
    if isinstance(arg, (str, int, float)) and not isinstance(arg, bool):
        return arg
    return str(arg)
