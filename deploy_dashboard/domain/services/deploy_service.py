import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict

from deploy_dashboard.domain.entities.deployment import DeployRecord, DeployStatus, resolve_deployed_at, utcnow
from deploy_dashboard.domain.errors import ValidationError
from deploy_dashboard.infrastructure.store.base_store import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "projectName", "operator", "environment", "branch", "commit", "status")
STATUS_VALUES = {status.value for status in DeployStatus}


@dataclass
class ClearResult:
    cleared: int
    mode: str


class DeployService:
    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def create(self, payload: Dict[str, Any]) -> DeployRecord:
        """Validate a CI payload, stamp it with an id and time, and persist it."""
        if not isinstance(payload, dict):
            raise ValidationError("invalid json")

        for key in REQUIRED_FIELDS:
            if not payload.get(key):
                raise ValidationError.missing_field(key)

        status = str(payload["status"])
        if status not in STATUS_VALUES:
            raise ValidationError(f"invalid status: {status}", field="status")

        note = payload.get("note")
        record = DeployRecord(
            title=str(payload["title"]),
            project_name=str(payload["projectName"]),
            operator=str(payload["operator"]),
            environment=str(payload["environment"]),
            branch=str(payload["branch"]),
            commit=str(payload["commit"]),
            note=str(note) if note else None,
            deployed_at=resolve_deployed_at(payload.get("deployedAt"), now=self.clock()),
            status=DeployStatus(status),
        )

        await self.store.put(record)
        logger.info(f"🚀 Recorded {record.status.value} deploy of {record.project_name} to {record.environment} ({record.id})")
        return record

    async def clear_all(self) -> ClearResult:
        cleared = await self.store.clear()
        logger.warning(f"🧹 Cleared all deploy data: {cleared} entries ({self.store.name})")
        return ClearResult(cleared=cleared, mode=self.store.name)
