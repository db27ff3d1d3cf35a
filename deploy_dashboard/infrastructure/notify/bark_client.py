"""Client for a Bark push relay (``<base><title>/<body>``)."""
import logging
from typing import Optional, Tuple
from urllib.parse import quote

import httpx

from deploy_dashboard.domain.errors import BackendUnavailableError

logger = logging.getLogger(__name__)


class BarkClient:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def build_url(self, title: str, body: str) -> str:
        return f"{self._base_url}{quote(title, safe='')}/{quote(body, safe='')}"

    async def push(self, title: str, body: str) -> Tuple[bool, str]:
        url = self.build_url(title, body)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Bark request failed: {e}")
            raise BackendUnavailableError("bark", str(e)) from e
        return response.is_success, response.text

    async def close(self):
        await self.client.aclose()
