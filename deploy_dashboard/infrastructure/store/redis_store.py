"""Remote backend on Upstash Redis.

Key layout:
    deploy_record:<id>   record JSON, expires with the retention window
    deploy_records_z     time index, score = deployedAt in epoch ms, member = id
    deploy_records       legacy list of record JSON, newest first, read-compatible only
    deploy_projects      set of project names
"""
import logging
from typing import List, Optional, Set

from deploy_dashboard.domain.entities.deployment import DeployRecord, parse_record
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.infrastructure.store.base_store import MAX_ITEMS, RecordStore, dedupe, newest_first
from deploy_dashboard.infrastructure.upstash.upstash_client import UpstashClient

logger = logging.getLogger(__name__)

DEPLOY_LIST_KEY = "deploy_records"
DEPLOY_INDEX_KEY = "deploy_records_z"
PROJECT_SET_KEY = "deploy_projects"
RECORD_KEY_PREFIX = "deploy_record:"


def record_key(record_id: str) -> str:
    return f"{RECORD_KEY_PREFIX}{record_id}"


class RedisRecordStore(RecordStore):
    name = "redis"

    def __init__(self, client: UpstashClient, retention: Optional[RetentionPolicy] = None):
        self.client = client
        self.retention = retention or RetentionPolicy()

    @property
    def ttl_seconds(self) -> int:
        return int(self.retention.window.total_seconds())

    async def put(self, record: DeployRecord) -> None:
        blob = record.to_json()
        await self.client.pipeline(
            [
                ["SET", record_key(record.id), blob, "EX", self.ttl_seconds],
                ["ZADD", DEPLOY_INDEX_KEY, record.score, record.id],
                # Exclusive bound keeps an entry sitting exactly on the cutoff
                ["ZREMRANGEBYSCORE", DEPLOY_INDEX_KEY, "-inf", f"({self.retention.cutoff_ms()}"],
                ["SADD", PROJECT_SET_KEY, record.project_name],
                ["LPUSH", DEPLOY_LIST_KEY, blob],
                ["LTRIM", DEPLOY_LIST_KEY, 0, MAX_ITEMS - 1],
            ]
        )
        logger.debug(f"Stored deploy record {record.id} in Redis")

    async def list(self, max_count: int = MAX_ITEMS) -> List[DeployRecord]:
        records = await self._list_from_index(max_count)
        if not records:
            records = await self._list_from_legacy_log(max_count)
        return records

    async def _list_from_index(self, max_count: int) -> List[DeployRecord]:
        ids = await self.client.execute("ZRANGE", DEPLOY_INDEX_KEY, 0, max_count - 1, "REV") or []
        if not ids:
            return []
        blobs = await self.client.execute("MGET", *[record_key(record_id) for record_id in ids]) or []
        # Index entries whose blob expired or is corrupt are skipped
        return [record for record in (parse_record(blob) for blob in blobs) if record is not None]

    async def _list_from_legacy_log(self, max_count: int) -> List[DeployRecord]:
        blobs = await self.client.execute("LRANGE", DEPLOY_LIST_KEY, 0, MAX_ITEMS - 1) or []
        records = [record for record in (parse_record(blob) for blob in blobs) if record is not None]
        return newest_first(dedupe(records))[:max_count]

    async def projects(self) -> Set[str]:
        members = await self.client.execute("SMEMBERS", PROJECT_SET_KEY) or []
        if members:
            return set(members)
        return {record.project_name for record in await self.list(MAX_ITEMS)}

    async def clear(self) -> int:
        record_keys = await self.client.execute("KEYS", f"{RECORD_KEY_PREFIX}*") or []
        keys = list(record_keys) + [DEPLOY_INDEX_KEY, DEPLOY_LIST_KEY, PROJECT_SET_KEY]
        removed = await self.client.execute("DEL", *keys) or 0
        logger.info(f"🧹 Deleted {removed} Redis keys")
        return int(removed)

    async def close(self) -> None:
        await self.client.close()
