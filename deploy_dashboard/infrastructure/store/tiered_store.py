import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Set

from deploy_dashboard.domain.entities.deployment import DeployRecord
from deploy_dashboard.domain.errors import BackendUnavailableError
from deploy_dashboard.infrastructure.store.base_store import MAX_ITEMS, RecordStore, newest_first

logger = logging.getLogger(__name__)


@dataclass
class StoreSink:
    """One backend in the tier list. A required sink's failures propagate."""

    store: RecordStore
    required: bool = False

    @property
    def name(self) -> str:
        return self.store.name


class TieredRecordStore(RecordStore):
    """Ordered list of backends, most authoritative first.

    Writes fan out to every sink. Reads walk the sinks in order and merge by
    record id until enough records are collected, earlier sinks winning.
    """

    def __init__(self, sinks: Sequence[StoreSink]):
        if not sinks:
            raise ValueError("TieredRecordStore needs at least one sink")
        self.sinks = list(sinks)

    @property
    def name(self) -> str:
        return "|".join(sink.name for sink in self.sinks)

    def _skip(self, sink: StoreSink, operation: str, error: BackendUnavailableError) -> None:
        if sink.required:
            raise error
        logger.warning(f"⚠️ {operation} on {sink.name} failed, continuing with next tier: {error}")

    async def put(self, record: DeployRecord) -> None:
        written = []
        for sink in self.sinks:
            try:
                await sink.store.put(record)
                written.append(sink.name)
            except BackendUnavailableError as e:
                self._skip(sink, "put", e)

        if not written:
            raise BackendUnavailableError(self.name, "no storage backend accepted the record")
        logger.info(f"💾 Stored deploy record {record.id} in {', '.join(written)}")

    async def list(self, max_count: int = MAX_ITEMS) -> List[DeployRecord]:
        merged: Dict[str, DeployRecord] = {}
        for sink in self.sinks:
            try:
                records = await sink.store.list(max_count)
            except BackendUnavailableError as e:
                self._skip(sink, "list", e)
                continue

            for record in records:
                merged.setdefault(record.id, record)
            if len(merged) >= max_count:
                break
        return newest_first(merged.values())[:max_count]

    async def projects(self) -> Set[str]:
        names: Set[str] = set()
        for sink in self.sinks:
            try:
                names |= await sink.store.projects()
            except BackendUnavailableError as e:
                self._skip(sink, "projects", e)
        return names

    async def clear(self) -> int:
        removed = 0
        for sink in self.sinks:
            try:
                removed += await sink.store.clear()
            except BackendUnavailableError as e:
                self._skip(sink, "clear", e)
        return removed

    async def close(self) -> None:
        for sink in self.sinks:
            await sink.store.close()
