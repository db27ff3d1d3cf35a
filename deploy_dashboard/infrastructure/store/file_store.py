"""JSON file backend.

The whole state lives in one document::

    {"records": [<DeployRecord>, ...], "projects": ["svc-a", ...]}

Records are kept newest first and capped at ``MAX_ITEMS``.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from deploy_dashboard.domain.entities.deployment import (
    DeployRecord,
    format_deployed_at,
    parse_deployed_at,
    parse_record,
)
from deploy_dashboard.domain.errors import BackendUnavailableError
from deploy_dashboard.domain.retention import RetentionPolicy
from deploy_dashboard.infrastructure.store.base_store import MAX_ITEMS, RecordStore, newest_first

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "deploy.json"


@dataclass
class PersistedState:
    records: List[DeployRecord] = field(default_factory=list)
    projects: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": [record.to_dict() for record in self.records],
            "projects": list(self.projects),
        }


class JsonFileRecordStore(RecordStore):
    name = "file"

    def __init__(self, data_dir: Path, retention: Optional[RetentionPolicy] = None, max_items: int = MAX_ITEMS):
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / DATA_FILE_NAME
        self.retention = retention or RetentionPolicy()
        self.max_items = max_items

    def load_state(self) -> PersistedState:
        """Read the document; a missing or corrupt file reads as an empty state.

        Records with a missing or unparsable deployedAt are stamped with the current time
        and the repaired document is written back.
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return PersistedState()
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Unreadable deploy data file {self.path}: {e}")
            return PersistedState()

        if not isinstance(raw, dict):
            return PersistedState()

        raw_records = raw.get("records") if isinstance(raw.get("records"), list) else []
        raw_projects = raw.get("projects") if isinstance(raw.get("projects"), list) else []

        repaired = False
        records = []
        for item in raw_records:
            if not isinstance(item, dict):
                continue
            stamped = parse_deployed_at(item.get("deployedAt")) is None
            if stamped:
                item = {**item, "deployedAt": format_deployed_at(self.retention.now())}
            record = parse_record(item)
            if record is None:
                continue
            repaired = repaired or stamped
            records.append(record)

        state = PersistedState(records=records, projects=[str(p) for p in raw_projects])
        if repaired:
            try:
                self.save_state(state)
            except BackendUnavailableError as e:
                logger.warning(f"⚠️ Could not write repaired deploy data: {e}")
        return state

    def save_state(self, state: PersistedState) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(state.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise BackendUnavailableError(self.name, str(e)) from e

    async def put(self, record: DeployRecord) -> None:
        state = self.load_state()
        records = [existing for existing in state.records if existing.id != record.id]
        records.insert(0, record)
        state.records = self.retention.apply(records)[: self.max_items]
        if record.project_name not in state.projects:
            state.projects.append(record.project_name)
        self.save_state(state)

    async def list(self, max_count: int = MAX_ITEMS) -> List[DeployRecord]:
        return newest_first(self.load_state().records)[:max_count]

    async def projects(self) -> Set[str]:
        state = self.load_state()
        return set(state.projects) | {record.project_name for record in state.records}

    async def clear(self) -> int:
        state = self.load_state()
        removed = len(state.records) + len(state.projects)
        self.save_state(PersistedState())
        logger.info(f"🧹 Cleared {removed} entries from {self.path}")
        return removed
