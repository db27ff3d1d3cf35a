"""Notify Service - relays deploy notifications to Bark when configured"""
import logging
from typing import Optional, Tuple

from deploy_dashboard.domain.errors import NotConfiguredError
from deploy_dashboard.infrastructure.notify.bark_client import BarkClient

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Deploy notification"


class NotifyService:
    def __init__(self, client: Optional[BarkClient] = None):
        self.client = client

    async def send(self, title: Optional[str] = None, body: Optional[str] = None) -> Tuple[bool, str]:
        if self.client is None:
            raise NotConfiguredError("BARK_BASE not set")
        ok, text = await self.client.push(DEFAULT_TITLE if title is None else title, "" if body is None else body)
        if not ok:
            logger.warning(f"⚠️ Bark relay rejected notification: {text[:200]}")
        return ok, text

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
