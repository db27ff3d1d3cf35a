import logging
from typing import List, Optional, Set

from deploy_dashboard.domain.entities.deployment import DeployRecord
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.infrastructure.store.base_store import MAX_ITEMS, RecordStore, newest_first

logger = logging.getLogger(__name__)


class MemoryRecordStore(RecordStore):
    """Process-local snapshot. Survives across requests, lost on restart."""

    name = "memory"

    def __init__(self, retention: Optional[RetentionPolicy] = None, max_items: int = MAX_ITEMS):
        self.retention = retention or RetentionPolicy()
        self.max_items = max_items
        self._records: List[DeployRecord] = []
        self._projects: Set[str] = set()

    async def put(self, record: DeployRecord) -> None:
        records = [existing for existing in self._records if existing.id != record.id]
        records.insert(0, record)
        self._records = self.retention.apply(records)[: self.max_items]
        self._projects.add(record.project_name)

    async def list(self, max_count: int = MAX_ITEMS) -> List[DeployRecord]:
        return newest_first(self._records)[:max_count]

    async def projects(self) -> Set[str]:
        return self._projects | {record.project_name for record in self._records}

    async def clear(self) -> int:
        removed = len(self._records) + len(self._projects)
        self._records = []
        self._projects = set()
        logger.info(f"🧹 Cleared {removed} in-memory entries")
        return removed
