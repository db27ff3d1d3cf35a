"""
Factory for assembling the record store tiers.

Backend selection happens once at startup from configuration; request
handlers receive the resulting store and never branch on backend presence.
"""

import logging
from typing import List, Optional

import httpx

from deploy_dashboard.config import Settings
from deploy_dashboard.domain.errors import NotConfiguredError
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.infrastructure.store.file_store import JsonFileRecordStore
from deploy_dashboard.infrastructure.store.memory_store import MemoryRecordStore
from deploy_dashboard.infrastructure.store.redis_store import RedisRecordStore
from deploy_dashboard.infrastructure.store.tiered_store import StoreSink, TieredRecordStore
from deploy_dashboard.infrastructure.upstash.upstash_client import UpstashClient

logger = logging.getLogger(__name__)


class RecordStoreFactory:
    """
    Builds the tiered record store described by the settings.

    Tier order: remote Redis (when credentials are present), JSON file, memory.
    Remote-only mode keeps just the Redis tier and marks it required.
    """

    @classmethod
    def create(
        cls,
        settings: Settings,
        retention: Optional[RetentionPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> TieredRecordStore:
        """
        Create a store for the given configuration.

        Args:
            settings: Application settings
            retention: Retention policy shared by every tier
            transport: Optional httpx transport for the Redis client (used by tests)

        Returns:
            TieredRecordStore: The configured store

        Raises:
            NotConfiguredError: If remote-only mode is on without Upstash credentials
        """
        retention = retention or RetentionPolicy()

        if settings.DEPLOY_REMOTE_ONLY:
            if not settings.remote_configured:
                raise NotConfiguredError("remote-only mode requires UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN")
            logger.info("🔒 Remote-only mode: Redis is the only record store")
            return TieredRecordStore([StoreSink(cls._redis_store(settings, retention, transport), required=True)])

        sinks: List[StoreSink] = []
        if settings.remote_configured:
            sinks.append(StoreSink(cls._redis_store(settings, retention, transport)))
        if settings.DEPLOY_FILE_STORE_ENABLED:
            sinks.append(StoreSink(JsonFileRecordStore(settings.data_dir, retention=retention)))
        if settings.DEPLOY_MEMORY_FALLBACK or not sinks:
            sinks.append(StoreSink(MemoryRecordStore(retention=retention)))

        store = TieredRecordStore(sinks)
        logger.info(f"📦 Record store tiers: {store.name}")
        return store

    @classmethod
    def _redis_store(
        cls,
        settings: Settings,
        retention: RetentionPolicy,
        transport: Optional[httpx.AsyncBaseTransport],
    ) -> RedisRecordStore:
        client = UpstashClient(
            settings.UPSTASH_REDIS_REST_URL,
            settings.UPSTASH_REDIS_REST_TOKEN,
            timeout=settings.REDIS_TIMEOUT_SECONDS,
            transport=transport,
        )
        return RedisRecordStore(client, retention=retention)
