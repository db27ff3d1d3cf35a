from typing import Any, Iterable, List, Optional

from deploy_dashboard.domain.entities.deployment import DeployRecord
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.infrastructure.store.base_store import MAX_ITEMS, RecordStore, dedupe, newest_first

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


def clamp_limit(raw: Any, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Coerce a requested page size into [1, maximum]; missing, zero or garbage means default."""
    try:
        value = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        value = 0
    if value == 0:
        value = default
    return max(1, min(maximum, value))


class QueryService:
    def __init__(self, store: RecordStore, retention: Optional[RetentionPolicy] = None):
        self.store = store
        self.retention = retention or RetentionPolicy()

    async def get_latest(self, limit: Any = DEFAULT_LIMIT, projects: Optional[Iterable[str]] = None) -> List[DeployRecord]:
        """Latest records inside the retention window, newest first, optionally for some projects only."""
        limit = clamp_limit(limit)
        wanted = set(projects) if projects else None

        records = self.retention.apply(await self.store.list(MAX_ITEMS))
        if wanted:
            records = [record for record in records if record.project_name in wanted]
        return newest_first(dedupe(records))[:limit]

    async def get_all_projects(self) -> List[str]:
        return sorted(await self.store.projects())
